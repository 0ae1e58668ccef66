# Third-party imports
import uvicorn
from decouple import config

if __name__ == "__main__":
    port = config("PORT", default=8000, cast=int)
    uvicorn.run("shopbot.main:app", host="0.0.0.0", port=port)
