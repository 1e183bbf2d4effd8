import uvicorn

from tubefetch.config.settings import config


def main():
    # uvicorn handles SIGTERM/SIGINT and drains in-flight requests
    uvicorn.run(
        "tubefetch.main:app",
        host=config.api.host,
        port=config.api.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
        timeout_graceful_shutdown=10,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
