import sys
import time
import signal
import argparse

import config
from utils import setup_logging, format_entropy
from scanner.blackboard import Blackboard
from scanner.module import EntropyModule
from scanner.pipeline import FilePipeline
from scanner.reporter import ResultsReporter
from scanner.watcher import RescanEventHandler, DirectoryWatcher
from dashboard.server import create_app


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="File Entropy Scanner")
    parser.add_argument("paths", nargs="*", help="Files or directories to score")
    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Descend into subdirectories of directory arguments",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=config.FILE_BUFFER_SIZE,
        help="Bytes per read (does not change the score)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=config.SCAN_WORKERS,
        help="Files scored in parallel",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help=f"Write a JSON scan report to {config.REPORT_DIR}",
    )
    parser.add_argument(
        "--watch",
        metavar="DIR",
        help="Keep running and rescore files in DIR as they change",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve results over HTTP while running",
    )
    args = parser.parse_args(argv)
    if not args.paths and not args.watch:
        parser.error("nothing to do: give PATH arguments or --watch DIR")
    if args.chunk_size < 1:
        parser.error("--chunk-size must be at least 1")
    return args


def main(argv=None):
    config.validate_config()
    args = parse_args(argv)
    setup_logging(config.LOG_DIR)

    blackboard = Blackboard()
    module = EntropyModule(blackboard, chunk_size=args.chunk_size)
    pipeline = FilePipeline(module)

    if not pipeline.start():
        print("[SCANNER] Entropy module failed to initialize.")
        return 1

    summary = {"processed": 0, "succeeded": 0, "failed": 0}
    if args.paths:
        summary = pipeline.process_paths(args.paths, recursive=args.recursive, workers=args.workers)
        for row in pipeline.results():
            score = "FAILED" if row["failed"] else format_entropy(row["entropy"])
            print(f"{row['path']}\t{score}")

    if args.report:
        reporter = ResultsReporter(config.REPORT_DIR)
        path = reporter.generate_report(
            summary, pipeline.results(), blackboard.get_all(), pipeline.outcomes.values()
        )
        print(f"[SCANNER] Report: {path}")

    if args.watch or args.serve:
        watcher = None
        if args.watch:
            watcher = DirectoryWatcher(args.watch, RescanEventHandler(pipeline), recursive=args.recursive)
            watcher.start()
            print(f"[SCANNER] Watching:  {args.watch}")

        def shutdown(signum, frame):
            print("\n[SCANNER] Shutting down...")
            if watcher:
                watcher.stop()
            pipeline.stop()
            sys.exit(0)

        signal.signal(signal.SIGINT, shutdown)
        try:
            signal.signal(signal.SIGTERM, shutdown)
        except (OSError, ValueError):
            pass

        if args.serve:
            print(f"[SCANNER] Dashboard: http://{config.DASHBOARD_HOST}:{config.DASHBOARD_PORT}")
            app = create_app(pipeline, report_dir=config.REPORT_DIR)
            app.run(
                host=config.DASHBOARD_HOST,
                port=config.DASHBOARD_PORT,
                debug=False,
                use_reloader=False,
            )
        else:
            print("[SCANNER] Press Ctrl+C to stop.\n")
            while True:
                time.sleep(1)

    pipeline.stop()
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
