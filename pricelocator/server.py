"""HTTP surface for the extractor service."""

from fastapi import FastAPI, Request
from fastapi.responses import Response

from pricelocator import config, service
from pricelocator.generator import TextGenerator


def create_app(generator: TextGenerator | None = None) -> FastAPI:
    app = FastAPI(title="price-locator")

    @app.api_route("/", methods=["POST", "OPTIONS"])
    async def locate_price(request: Request) -> Response:
        raw = await request.body()
        event = {
            "httpMethod": request.method,
            "body": raw or None,
        }
        envelope = await service.handle(event, generator)
        return Response(
            content=envelope["body"],
            status_code=envelope["statusCode"],
            headers=envelope["headers"],
            media_type="application/json",
        )

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
