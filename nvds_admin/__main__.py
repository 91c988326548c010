import uvicorn

from nvds_admin.config import settings


def main():
    uvicorn.run("nvds_admin.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
