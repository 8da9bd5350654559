import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from packages.shortgen.captions import Whisper
from packages.shortgen.config import Settings
from packages.shortgen.ffmpeg import FFMpeg
from packages.shortgen.orchestrate import ShortCreator
from packages.shortgen.render import Remotion
from packages.shortgen.tts import Kokoro
from .routers import assets, short_video

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings.ensure_dirs()

    # Engines come up one after another; any failure aborts startup.
    ffmpeg = FFMpeg.init(settings)
    kokoro = Kokoro.init(settings)
    whisper = Whisper.init(settings)
    remotion = Remotion.init(settings)

    app.state.settings = settings
    app.state.ffmpeg = ffmpeg
    app.state.kokoro = kokoro
    app.state.whisper = whisper
    app.state.creator = ShortCreator(settings, ffmpeg, kokoro, whisper, remotion)
    LOGGER.info("Short creator ready on port %d", settings.port)
    yield
    await app.state.creator.shutdown()


app = FastAPI(title="Shortgen API", version="0.1", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

app.include_router(short_video.router, prefix="/v1")
app.include_router(assets.router, prefix="/v1")
