"""Module entry-point to run the CertiStage development server."""
from __future__ import annotations

import uvicorn


def main() -> None:
    uvicorn.run("certistage.api.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
