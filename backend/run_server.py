import os
import uvicorn


def main():
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("ENVIRONMENT", "development") != "production"

    print(f"Starting Portfolio API on http://{host}:{port}")
    print(f"   Swagger: http://{host}:{port}/docs")
    uvicorn.run("portfolio.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
