# run_server.py
import os, sys, traceback, faulthandler
from pathlib import Path

# write crash logs next to the project
BASE_DIR = Path(__file__).resolve().parent
LOG_FILE = BASE_DIR / "backend_crash.log"


def log(msg: str):
    with open(LOG_FILE, "a", encoding="utf-8") as f:
        f.write(msg + "\n")


def main():
    # dump fatal crashes too
    crash_log = open(LOG_FILE, "a", encoding="utf-8")
    faulthandler.enable(crash_log)

    try:
        log("\n--- START ---")
        log(f"python={sys.executable}")
        log(f"cwd={os.getcwd()}")

        import uvicorn

        # IMPORTANT: import app after logging is ready
        from lendflow.core.config import HOST, PORT, LOG_LEVEL
        from main import app

        uvicorn.run(app, host=HOST, port=PORT, reload=False, log_level=LOG_LEVEL.lower())

    except Exception:
        err = traceback.format_exc()
        log(err)
        print(err, file=sys.stderr)
        sys.exit(1)
    finally:
        faulthandler.disable()
        crash_log.close()


if __name__ == "__main__":
    main()
