# main.py
import argparse
import logging

from config import config
from views import TaskCheckerApp


def setup_logging(data_dir=None):
    """Log to a file; the terminal belongs to the UI."""
    log_file = config.log_file_for(data_dir)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    parser = argparse.ArgumentParser(description="A checklist with daily auto-reset and timed reminders.")
    parser.add_argument("--data-dir", help=f"where checklists are stored (default: {config.DATA_DIR})")
    args = parser.parse_args()

    setup_logging(args.data_dir)
    app = TaskCheckerApp(data_dir=args.data_dir)
    app.run()


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        # Print a clean message on any unhandled error
        logging.getLogger(__name__).exception("Task Checker crashed")
        print(f"An error occurred: {e}")
    finally:
        print("Task Checker has shut down.")
