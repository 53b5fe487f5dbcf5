# backend/main.py
import os
from dotenv import load_dotenv
load_dotenv()

from backend.app import create_app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backend.main:app",
        host=os.getenv("VITRINE_HOST", "0.0.0.0"),
        port=int(os.getenv("VITRINE_PORT", "8000")),
    )
