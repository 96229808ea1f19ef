def get_html_template() -> str:
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0, user-scalable=no">
        <title>Strip Booth</title>
        <style>
            body { margin: 0; background: #111; color: #fff; font-family: sans-serif; }
            .page { display: flex; gap: 8px; height: 100vh; }
            .left { width: 70%; display: flex; flex-direction: column; align-items: center; justify-content: center; gap: 8px; }
            .right { width: calc(30% - 8px); display: flex; flex-direction: column; align-items: center; justify-content: center; gap: 4px; }
            .video { position: relative; }
            .video img { width: 100%; height: 100%; object-fit: cover; }
            .countdown { position: absolute; top: 16px; left: 16px; font-size: 8rem; font-weight: bold; text-shadow: 0 0 10px rgba(0,0,0,.7); }
            .flash { position: absolute; inset: 0; background: rgba(255,255,255,.8); display: none; }
            .shot { object-fit: contain; background: #222; }
            .result { position: fixed; inset: 0; background: rgba(0,0,0,.85); display: none; align-items: center; justify-content: center; flex-direction: column; gap: 16px; }
            button { font-size: 1.4rem; padding: 12px 24px; border-radius: 8px; border: none; }
            button.selected { background: #4caf50; color: #fff; }
        </style>
    </head>
    <body>
        <div class="page">
            <div class="left">
                <div class="video" id="videoBox">
                    <img id="preview" src="" alt="Camera Preview" />
                    <div class="flash" id="flash"></div>
                    <div class="countdown" id="countdown"></div>
                </div>
                <div id="controls">
                    <span id="shotOptions"></span>
                    <button id="startBtn" onclick="startSession()">Start</button>
                    <button id="cancelBtn" onclick="post('/api/session/cancel')">Cancel</button>
                </div>
                <div id="status">Ready</div>
            </div>
            <div class="right" id="shots"></div>
        </div>
        <div class="result" id="result">
            <img id="qr" alt="Scan to download" />
            <a id="download" href="#" download>Download</a>
            <button onclick="post('/api/session/reset')">Done</button>
        </div>
        <script>
            let shotCount = 3;
            let layout = null;
            let lastShots = 0;

            async function post(url, body) {
                const res = await fetch(url, {
                    method: 'POST',
                    headers: {'Content-Type': 'application/json'},
                    body: body ? JSON.stringify(body) : null
                });
                if (!res.ok) {
                    const err = await res.json();
                    document.getElementById('status').textContent = err.detail;
                }
                return res;
            }

            function startSession() {
                post('/api/session/start', {shot_count: shotCount});
            }

            async function loadOptions() {
                const opts = await (await fetch('/api/session/options')).json();
                shotCount = opts.default;
                const box = document.getElementById('shotOptions');
                box.innerHTML = '';
                opts.options.forEach(n => {
                    const b = document.createElement('button');
                    b.textContent = n;
                    b.className = n === shotCount ? 'selected' : '';
                    b.onclick = () => { shotCount = n; loadLayout(); loadOptionsSelection(); };
                    box.appendChild(b);
                });
            }

            function loadOptionsSelection() {
                document.querySelectorAll('#shotOptions button').forEach(b => {
                    b.className = Number(b.textContent) === shotCount ? 'selected' : '';
                });
            }

            async function loadLayout() {
                const w = document.documentElement.clientWidth;
                const h = document.documentElement.clientHeight;
                layout = await (await fetch(`/api/layout?width=${w}&height=${h}&shots=${shotCount}`)).json();
                const box = document.getElementById('videoBox');
                box.style.width = layout.video_width + 'px';
                box.style.height = layout.video_height + 'px';
                renderShots(lastShots);
            }

            function renderShots(count) {
                const column = document.getElementById('shots');
                column.innerHTML = '';
                for (let i = 0; i < count; i++) {
                    const img = document.createElement('img');
                    img.className = 'shot';
                    img.src = `/api/session/shots/${i}?t=${Date.now()}`;
                    if (layout) {
                        img.style.width = layout.preview_width + 'px';
                        img.style.height = layout.preview_height + 'px';
                    }
                    column.appendChild(img);
                }
            }

            async function showResult() {
                const artifact = await (await fetch('/api/session/artifact')).json();
                const qr = document.getElementById('qr');
                const link = document.getElementById('download');
                if (artifact.kind === 'remote') {
                    qr.src = 'data:image/png;base64,' + artifact.retrieval_code;
                    qr.style.display = 'block';
                    link.style.display = 'none';
                } else {
                    qr.style.display = 'none';
                    link.href = artifact.download_url;
                    link.style.display = 'block';
                }
                document.getElementById('result').style.display = 'flex';
            }

            function onState(s) {
                const countdown = document.getElementById('countdown');
                countdown.textContent = s.phase === 'countdown' ? s.seconds_remaining : '';
                document.getElementById('flash').style.display = s.phase === 'flash' ? 'block' : 'none';
                document.getElementById('status').textContent =
                    s.phase === 'failed' ? 'Something went wrong: ' + s.failure_reason : s.phase;
                if (s.shot_count !== lastShots) {
                    lastShots = s.shot_count;
                    renderShots(lastShots);
                }
                if (s.phase === 'complete') {
                    showResult();
                } else {
                    document.getElementById('result').style.display = 'none';
                }
            }

            function connect() {
                const ws = new WebSocket(`${location.protocol === 'https:' ? 'wss' : 'ws'}://${location.host}/ws`);
                ws.onmessage = (event) => {
                    const msg = JSON.parse(event.data);
                    if (msg.type === 'preview') {
                        document.getElementById('preview').src = 'data:image/jpeg;base64,' + msg.data;
                    } else if (msg.type === 'state') {
                        onState(msg.session);
                    }
                };
                ws.onclose = () => setTimeout(connect, 1000);
            }

            window.addEventListener('resize', loadLayout);
            loadOptions().then(loadLayout);
            connect();
        </script>
    </body>
    </html>
    """
