# chatrooms/core/config.py
import os
from typing import List
from dotenv import load_dotenv


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings:
    """
    Setup environment variables.
        - API_KEYS comma separated list of keys accepted by every operation
        - ALLOWED_ORIGINS comma separated list of origins ("*" allows any)
        - HOST / PORT where uvicorn binds
        - SEND_TIMEOUT_SECONDS how long one push to a client may take before
          the client is dropped
    """

    # Load environment variables from the .env file
    load_dotenv()

    API_KEYS: List[str] = _split_csv(os.getenv("API_KEYS", "demo-key"))
    ALLOWED_ORIGINS: List[str] = _split_csv(os.getenv("ALLOWED_ORIGINS", "*"))

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "4000"))
    SEND_TIMEOUT_SECONDS: float = float(os.getenv("SEND_TIMEOUT_SECONDS", "5"))

    def origin_allowed(self, origin: str | None) -> bool:
        """Clients without an Origin header (CLI tools, tests) are always allowed."""
        if not origin:
            return True
        return "*" in self.ALLOWED_ORIGINS or origin in self.ALLOWED_ORIGINS


settings = Settings()
