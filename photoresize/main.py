import argparse

from fastapi import FastAPI

from photoresize.routers.convert_jobs import router as convert_router


def create_app() -> FastAPI:
	app = FastAPI(title="PhotoResize - Batch Conversion API", version="0.1.0")
	app.include_router(convert_router)
	return app


app = create_app()


def serve() -> None:
	parser = argparse.ArgumentParser(description="Serve the batch conversion job API")
	parser.add_argument("--host", default="127.0.0.1")
	parser.add_argument("--port", type=int, default=8000)
	parser.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
	args = parser.parse_args()

	import uvicorn

	uvicorn.run("photoresize.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
	serve()
