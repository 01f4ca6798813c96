"""REST API: sensor sample ingestion, state readout, settings."""

from __future__ import annotations

import math
from dataclasses import asdict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from skyguide.rendering.overlay import build_line_buffer, build_star_buffer, describe_region
from skyguide.session import SkyGuideSession, pointing_from_angles


def _cast(current_value, new_value):
    """Cast new_value to the same type as the existing config attribute."""
    if isinstance(current_value, bool):
        return new_value in (True, "true", "1", "on", 1)
    elif isinstance(current_value, int):
        return int(float(new_value))
    elif isinstance(current_value, float):
        return float(new_value)
    return new_value


def _typed_dict(config_obj, body: dict) -> dict:
    """Return a dict of values from body, cast to match config_obj field types."""
    result = {}
    for key, value in body.items():
        if hasattr(config_obj, key):
            result[key] = _cast(getattr(config_obj, key), value)
    return result


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, 400)


def create_router(session: SkyGuideSession) -> APIRouter:
    router = APIRouter()

    # --- REST API: sensor feeds ---

    @router.post("/api/position")
    async def api_position(request: Request):
        try:
            body = await request.json()
            lat = float(body["latitude"])
            lon = float(body["longitude"])
            ts = body.get("timestamp")
            ts = None if ts is None else float(ts)
        except (ValueError, KeyError, TypeError):
            return _bad_request("Expected latitude and longitude in degrees")
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 360.0):
            return _bad_request("Latitude/longitude out of range")
        session.tracker.update_position(lat, lon, ts)
        return JSONResponse({"status": "ok"})

    @router.post("/api/heading")
    async def api_heading(request: Request):
        try:
            body = await request.json()
            raw = float(body["heading"])
        except (ValueError, KeyError, TypeError):
            return _bad_request("Expected heading in degrees")
        if not math.isfinite(raw):
            return _bad_request("Heading must be finite")
        smoothed = session.tracker.update_heading(raw)
        return JSONResponse({"status": "ok", "heading": smoothed})

    @router.post("/api/pointing")
    async def api_pointing(request: Request):
        try:
            body = await request.json()
            if "altitude" in body:
                direction = pointing_from_angles(float(body["altitude"]),
                                                 float(body["azimuth"]))
            else:
                direction = [float(body["x"]), float(body["y"]), float(body["z"])]
        except (ValueError, KeyError, TypeError):
            return _bad_request("Expected x/y/z or altitude/azimuth")
        session.set_pointing(direction)
        return JSONResponse({"status": "ok"})

    @router.post("/api/select")
    async def api_select():
        code = session.select()
        return JSONResponse({"status": "ok", "selected": code})

    @router.post("/api/dismiss")
    async def api_dismiss():
        session.dismiss()
        return JSONResponse({"status": "ok"})

    # --- REST API: state ---

    @router.get("/api/stats")
    async def api_stats():
        return JSONResponse(session.stats)

    @router.get("/api/observer")
    async def api_observer():
        obs = session.tracker.snapshot()
        return JSONResponse({
            "initialized": session.tracker.initialized,
            "latitude": math.degrees(obs.latitude),
            "longitude": math.degrees(obs.longitude),
            "heading": obs.heading,
            "lst": obs.lst,
            "timestamp": obs.timestamp,
        })

    @router.get("/api/positions")
    async def api_positions(above_horizon: bool = False):
        positions = session.engine.snapshot()
        if above_horizon:
            positions = [p for p in positions if p.y >= 0.0]
        return JSONResponse([asdict(p) for p in positions])

    @router.get("/api/buffers")
    async def api_buffers():
        """Star and figure-line vertices (x, y, z, r, g, b, a) for a renderer."""
        positions = session.engine.snapshot()
        highlighted = session.matcher.confirmed
        return JSONResponse({
            "highlighted": highlighted,
            "stars": build_star_buffer(positions).tolist(),
            "lines": build_line_buffer(session.catalog, positions, highlighted).tolist(),
        })

    @router.get("/api/gaze")
    async def api_gaze():
        return JSONResponse(asdict(session.matcher.state))

    @router.get("/api/regions")
    async def api_regions():
        return JSONResponse([
            {
                "code": r.code,
                "name": r.name,
                "centroid_ra": r.centroid_ra,
                "centroid_dec": r.centroid_dec,
                "segments": len(r.segments),
            }
            for r in session.catalog.regions
        ])

    @router.get("/api/regions/{code}")
    async def api_region(code: str):
        region = session.catalog.get_region(code)
        if region is None:
            return JSONResponse({"error": "Unknown region"}, 404)
        return JSONResponse({
            "code": region.code,
            "name": region.name,
            "text": describe_region(session.catalog, code),
            "members": [o.object_id for o in session.catalog.region_members(code)],
        })

    # --- REST API: settings ---

    @router.post("/api/settings/gaze")
    async def api_update_gaze(request: Request):
        body = await request.json()
        try:
            typed = _typed_dict(session.config.gaze, body)
        except (ValueError, TypeError):
            return _bad_request("Gaze settings must be numeric")
        session.update_gaze_config(**typed)
        return JSONResponse({"status": "ok", "updated": typed})

    return router
