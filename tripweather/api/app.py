import sys
import time
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from tripweather.core import replies
from tripweather.core.errors import ConfigError, ProviderError
from tripweather.core.policy import ChatResult, default_country, provider_name, respond
from tripweather.metrics.log import log_interaction
from tripweather.nlu import get_alias_table
from tripweather.tools import speech
from tripweather.tools.weatherapi import has_api_key

app = FastAPI(title="Trip Weather Chatbot")


@app.on_event("startup")
async def startup_event():
    print("🔹 Starting Trip Weather Chatbot API...")
    # Build the read-only alias table once, before the first request
    aliases = get_alias_table()
    if not has_api_key():
        print("[api] WARN: WEATHER_API_KEY is not set; chat requests will fail", file=sys.stderr)
    print(f"✅ Startup complete ({len(aliases)} aliases, geocode={provider_name()}).")


@app.on_event("shutdown")
async def shutdown_event():
    print("🔻 Shutting down Trip Weather Chatbot API...")


class ChatMessage(BaseModel):
    message: str = ""


class SpeechSynthesisPayload(BaseModel):
    text: str
    voice: Optional[str] = None
    language: Optional[str] = None


@app.get("/health")
def health():
    return {
        "status": "ok",
        "geo_provider": provider_name(),
        "default_country": default_country(),
        "aliases": len(get_alias_table()),
        "api_key_configured": has_api_key(),
    }


def _record(text: str, result: ChatResult, t0: float) -> None:
    latency_ms = int((time.time() - t0) * 1000)
    try:
        log_interaction(
            text=text,
            outcome=result.outcome,
            latency_ms=latency_ms,
            reply=result.reply,
            city=result.city,
            day=result.day,
            location_label=result.location,
        )
    except Exception as e:
        print(f"[metrics] WARN: could not log interaction: {e}", file=sys.stderr)


def _chat(text: str):
    """Run one chat turn; returns (status_code, ChatResult)."""
    t0 = time.time()
    text = (text or "").strip()
    if not text:
        status, result = 400, ChatResult(reply=replies.EMPTY_MESSAGE_REPLY, outcome="empty")
        _record(text, result, t0)
        return status, result
    try:
        status, result = 200, respond(text)
    except ConfigError as e:
        print(f"[api] config error: {e}", file=sys.stderr)
        status, result = 500, ChatResult(reply=replies.CONFIG_ERROR_REPLY, outcome="config_error")
    except ProviderError as e:
        print(f"[api] provider error (status={e.status_code}): {e}", file=sys.stderr)
        status, result = 502, ChatResult(reply=replies.PROVIDER_ERROR_REPLY, outcome="provider_error")
    except Exception as e:
        print(f"❌ Chat error: {e!r}", file=sys.stderr)
        status, result = 500, ChatResult(reply=replies.GENERIC_ERROR_REPLY, outcome="error")
    _record(text, result, t0)
    return status, result


@app.post("/chat")
def chat(msg: ChatMessage):
    status, result = _chat(msg.message)
    return JSONResponse(status_code=status, content={"reply": result.reply, **result.summary()})


def _tts_stream_response(text: str, voice: Optional[str], language: Optional[str]):
    try:
        generator = speech.stream_speech(text, voice_id=voice, language=language)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - unexpected failures
        raise HTTPException(status_code=500, detail="Unable to synthesize speech.") from exc
    return StreamingResponse(generator, media_type="audio/wav", headers={"Cache-Control": "no-store"})


@app.get("/speech/synthesize")
def speech_synthesize_get(text: str, voice: Optional[str] = None, language: Optional[str] = None):
    return _tts_stream_response(text, voice, language)


@app.post("/speech/synthesize")
def speech_synthesize_post(payload: SpeechSynthesisPayload):
    return _tts_stream_response(payload.text, payload.voice, payload.language)


async def _transcribe_upload(file: UploadFile, language: Optional[str]):
    audio_bytes = await file.read()
    if not audio_bytes:
        raise HTTPException(status_code=400, detail="Audio payload is empty.")
    try:
        return speech.transcribe_wav(audio_bytes, language=language)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover - unexpected failures
        raise HTTPException(status_code=500, detail="Unable to transcribe audio.") from exc


@app.post("/speech/transcribe")
async def speech_transcribe(file: UploadFile = File(...), language: Optional[str] = Form(None)):
    transcript, detected, duration = await _transcribe_upload(file, language)
    return {
        "text": transcript,
        "language": detected,
        "audio_seconds": duration,
    }


@app.post("/chat/voice")
async def chat_voice(file: UploadFile = File(...), language: Optional[str] = Form(None)):
    transcript, detected, _ = await _transcribe_upload(file, language)
    status, result = _chat(transcript)
    return JSONResponse(
        status_code=status,
        content={
            "transcript": transcript,
            "language": detected,
            "reply": result.reply,
            **result.summary(),
        },
    )
