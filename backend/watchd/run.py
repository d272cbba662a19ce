import os
import uvicorn

from watchd.core.config import get_settings


def main() -> None:
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("watchd.main:app", host="0.0.0.0", port=port, reload=get_settings().DEBUG)


if __name__ == "__main__":
    main()
