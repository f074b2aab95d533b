"""
Web 진입점

실행 방법:
    python -m web
    python -m web --host 0.0.0.0 --port 8080
"""

import argparse

import uvicorn

from core.constants import Defaults


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="AIVEL Ledger API 서버")
    parser.add_argument("--host", default=Defaults.WEB_HOST, help="바인드 주소")
    parser.add_argument("--port", type=int, default=Defaults.WEB_PORT, help="포트")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    uvicorn.run(
        "web.app:app",
        host=args.host,
        port=args.port,
        log_level=Defaults.LOG_LEVEL.lower(),
        reload=False,
    )
