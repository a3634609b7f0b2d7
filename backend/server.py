from wewallet.config import settings
from wewallet.init_db import init_db
from wewallet.main import app

if __name__ == "__main__":
    import uvicorn
    init_db()
    uvicorn.run(app, host=settings.host, port=settings.port)
