import os
import json
import math
import queue
import threading

from flask import Flask, jsonify, Response, send_from_directory


def create_app(pipeline, report_dir=None):
    app = Flask(__name__)
    app.config["REPORT_DIR"] = report_dir

    blackboard = pipeline.blackboard
    sse_clients = []
    sse_lock = threading.Lock()

    def broadcast_attribute(attribute):
        data = json.dumps(attribute.to_dict())
        dead_clients = []
        with sse_lock:
            for client_q in sse_clients:
                try:
                    client_q.put_nowait(data)
                except queue.Full:
                    dead_clients.append(client_q)
            for q in dead_clients:
                sse_clients.remove(q)

    blackboard.subscribe(broadcast_attribute)

    def _report_dir():
        return app.config.get("REPORT_DIR") or os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "reports"
        )

    @app.route("/")
    def index():
        return jsonify({
            "module": pipeline.module.name,
            "endpoints": [
                "/api/status",
                "/api/files",
                "/api/attributes",
                "/api/attributes/recent",
                "/api/attributes/<file_id>",
                "/api/reports",
                "/api/stream",
            ],
        })

    @app.route("/api/attributes")
    def api_all_attributes():
        return jsonify(blackboard.get_all())

    @app.route("/api/attributes/recent")
    def api_recent_attributes():
        return jsonify(blackboard.get_recent(200))

    @app.route("/api/attributes/<int:file_id>")
    def api_file_attributes(file_id):
        attrs = blackboard.get_for_file(file_id)
        if not attrs and file_id not in pipeline.files:
            return jsonify({"error": f"unknown file id {file_id}"}), 404
        return jsonify([a.to_dict() for a in attrs])

    @app.route("/api/files")
    def api_files():
        rows = []
        for row in pipeline.results():
            entropy = row["entropy"]
            if entropy is not None and math.isnan(entropy):
                entropy = None
            rows.append(dict(row, entropy=entropy))
        return jsonify(rows)

    @app.route("/api/status")
    def api_status():
        return jsonify({
            "running": pipeline.is_running(),
            "files": len(pipeline.files),
            "failed": len(pipeline.failed),
            "attributes": len(blackboard),
        })

    @app.route("/api/reports")
    def api_reports():
        report_dir = _report_dir()
        if not os.path.isdir(report_dir):
            return jsonify([])
        files = sorted(
            [f for f in os.listdir(report_dir) if f.endswith(".json")],
            reverse=True,
        )
        return jsonify(files)

    @app.route("/api/reports/<filename>")
    def api_report_detail(filename):
        if not filename.endswith(".json"):
            return jsonify({"error": "invalid filename"}), 400
        return send_from_directory(_report_dir(), filename)

    @app.route("/api/stream")
    def attribute_stream():
        client_q = queue.Queue(maxsize=500)
        with sse_lock:
            sse_clients.append(client_q)

        def generate():
            try:
                while True:
                    try:
                        data = client_q.get(timeout=25)
                        yield f"data: {data}\n\n"
                    except queue.Empty:
                        yield ": keepalive\n\n"
            except GeneratorExit:
                with sse_lock:
                    if client_q in sse_clients:
                        sse_clients.remove(client_q)

        return Response(
            generate(),
            mimetype="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
                "Connection": "keep-alive",
            },
        )

    return app
