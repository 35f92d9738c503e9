import uvicorn

from gymp2.config import APP_HOST, APP_PORT, LOG_LEVEL


def main():
    uvicorn.run("gymp2.main:app", host=APP_HOST, port=APP_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
