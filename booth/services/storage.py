import logging
import os
from datetime import datetime
from typing import List, Optional

from booth.models.photo import LocalArtifact

logger = logging.getLogger(__name__)

PHOTO_EXTENSIONS = (".jpg", ".jpeg", ".png")


class LocalPhotoStore:
    """Keeps strips whose upload failed so the kiosk can still hand them out."""

    def __init__(self, photos_dir: str):
        self.photos_dir = photos_dir
        os.makedirs(self.photos_dir, exist_ok=True)

    def save(self, artifact: LocalArtifact) -> str:
        filename = os.path.basename(artifact.suggested_filename)
        filepath = os.path.join(self.photos_dir, filename)
        with open(filepath, "wb") as f:
            f.write(artifact.encoded_bytes)
        logger.info("Saved strip locally as %s", filepath)
        return filename

    def path_for(self, filename: str) -> Optional[str]:
        if filename != os.path.basename(filename):
            return None
        filepath = os.path.join(self.photos_dir, filename)
        return filepath if os.path.isfile(filepath) else None

    def list_photos(self) -> List[dict]:
        photos = []
        if os.path.exists(self.photos_dir):
            for filename in os.listdir(self.photos_dir):
                if filename.lower().endswith(PHOTO_EXTENSIONS):
                    stat = os.stat(os.path.join(self.photos_dir, filename))
                    photos.append({
                        "filename": filename,
                        "size": stat.st_size,
                        "created": datetime.fromtimestamp(stat.st_mtime).isoformat(),
                        "download_url": f"/api/photos/{filename}",
                    })
        return sorted(photos, key=lambda x: x["created"], reverse=True)
