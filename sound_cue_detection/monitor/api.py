from __future__ import annotations

from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sound_cue_detection.monitor.config import MonitorConfig
from sound_cue_detection.monitor.labels import SoundLabel, tuning_table
from sound_cue_detection.monitor.service import MonitorService
from sound_cue_detection.monitor.simulation import simulate_sound


class WindowPayload(BaseModel):
    classifications: Dict[str, float]
    t: Optional[float] = None


class LabelToggle(BaseModel):
    enabled: bool


def _resolve_label(name: str) -> SoundLabel:
    try:
        return SoundLabel.parse(name)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def create_app(service: MonitorService | None = None) -> FastAPI:
    app = FastAPI(title="Sound Cue Detection", version="0.1.0")
    if service is None:
        service = MonitorService(config=MonitorConfig.from_env())
    app.state.service = service

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        service.close()

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/status")
    def status():
        return JSONResponse(service.status())

    @app.get("/labels")
    def labels():
        enabled = service.adapter.enabled_labels()
        rows = [dict(row, enabled=SoundLabel(row["label"]) in enabled) for row in tuning_table()]
        return JSONResponse(rows)

    @app.put("/labels/{name}")
    def toggle_label(name: str, payload: LabelToggle):
        label = _resolve_label(name)
        service.adapter.set_label_enabled(label, payload.enabled)
        return JSONResponse({"label": label.value, "enabled": payload.enabled})

    @app.post("/windows")
    def post_window(payload: WindowPayload):
        event = service.adapter.handle_window(payload.classifications, now=payload.t)
        return JSONResponse({"detection": event.to_dict() if event is not None else None})

    @app.post("/simulate/{name}")
    def simulate(name: str, seed: Optional[int] = None):
        label = _resolve_label(name)
        if not service.adapter.is_enabled(label):
            return JSONResponse({"status": "disabled", "label": label.value}, status_code=409)
        result = simulate_sound(service.adapter, label, seed=seed, interval_seconds=service.config.window_seconds)
        return JSONResponse(
            {
                "label": label.value,
                "confidence": round(result.confidence, 4),
                "frames": result.frames,
                "detections": [event.to_dict() for event in result.detections],
            }
        )

    @app.post("/session/reset")
    def reset_session():
        service.restart()
        return JSONResponse({"status": "reset", "cooldowns_preserved": service.engine.preserve_cooldowns_on_reset})

    return app


def main() -> int:
    import uvicorn

    uvicorn.run("sound_cue_detection.monitor.api:create_app", factory=True, host="0.0.0.0", port=8080)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
