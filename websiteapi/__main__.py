import uvicorn

from websiteapi.config import config

# uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which closes the database
uvicorn.run("websiteapi.main:app", host=config.HOST, port=config.PORT)
