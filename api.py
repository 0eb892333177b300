"""FastAPI backend for the Concrete Staircase Configurator.
Runs the profile engine server-side and serves profiles (JSON), self-contained
GLB solids for the Three.js viewer, and DXF elevations with dimensions.
"""
import os
import io
import json
import struct
import base64
import tempfile
import traceback
import ezdxf
from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response, JSONResponse
from pydantic import BaseModel
from build123d import export_gltf
from staircase_profile import (
    StaircaseSpec, InvalidSpec, compute, stair_stats, DEFAULT_CONFIG,
)
from staircase_solid import build_solid
from dimension_annotator import DIMENSION_STYLE
from validators.building_regs import StairRegsValidator

app = FastAPI()

# Concrete grey, matte
CONCRETE_STYLE = {"color": [0.58, 0.64, 0.72], "metallic": 0.2, "roughness": 0.9}


class LandingConfig(BaseModel):
    step_index: int
    depth: float
    id: Optional[str] = None


class StaircaseConfig(BaseModel):
    total_height: float
    width: float
    num_steps: int
    step_depth: float
    slab_thickness: float
    landings: list[LandingConfig] = []
    show_dimensions: bool = True
    scale: float = 0.01  # cm -> m for the viewer


def _compute(config: StaircaseConfig):
    config_dict = config.dict()
    show_dimensions = config_dict.pop("show_dimensions")
    config_dict.pop("scale")
    spec = StaircaseSpec.from_config(config_dict)
    return compute(spec, dimensions=show_dimensions)


def _scaled(point, scale):
    return [c * scale for c in point]


def profile_to_dict(result, scale=1.0):
    """JSON payload for a computed profile.

    Geometry (polygon, segments, soffit, annotations) is multiplied by `scale`
    so it shares the frame of a solid built with the same scale; stats stay in
    the input unit.
    """
    return {
        "config": result.spec.to_config(),
        "scale": scale,
        "polygon": [_scaled(p, scale) for p in result.polygon],
        "segments": [
            {
                "kind": s.kind.value,
                "start_step": s.start_step,
                "end_step": s.end_step,
                "start": _scaled((s.start_x, s.start_y), scale),
                "end": _scaled((s.end_x, s.end_y), scale),
            }
            for s in result.segments
        ],
        "soffit": [
            {"x": v.x * scale, "y": v.y * scale, "role": v.role.value, "clamped": v.clamped}
            for v in result.soffit
        ],
        "annotations": [
            {
                "start": _scaled(d.start, scale),
                "end": _scaled(d.end, scale),
                "label": d.label,
                "color": d.color,
                "rgb": list(DIMENSION_STYLE[d.color]["color"]),
            }
            for d in result.annotations
        ],
        "stats": stair_stats(result),
    }


def _inject_concrete_material(gltf_json):
    """Replace exported materials with a single concrete material on every primitive."""
    r, g, b = CONCRETE_STYLE["color"]
    gltf_json["materials"] = [{
        "name": "concrete",
        "pbrMetallicRoughness": {
            "baseColorFactor": [r, g, b, 1.0],
            "metallicFactor": CONCRETE_STYLE["metallic"],
            "roughnessFactor": CONCRETE_STYLE["roughness"],
        },
    }]
    for mesh in gltf_json.get("meshes", []):
        for prim in mesh.get("primitives", []):
            prim["material"] = 0


def pack_glb(gltf_path):
    """Read .gltf + .bin → self-contained GLB bytes with the concrete material."""
    with open(gltf_path, "r") as f:
        gltf_json = json.load(f)

    bin_path = gltf_path.rsplit(".", 1)[0] + ".bin"
    bin_data = b""
    if os.path.exists(bin_path):
        with open(bin_path, "rb") as f:
            bin_data = f.read()
        if "buffers" in gltf_json:
            for buf in gltf_json["buffers"]:
                if "uri" in buf:
                    del buf["uri"]
                buf["byteLength"] = len(bin_data)

    _inject_concrete_material(gltf_json)

    json_bytes = json.dumps(gltf_json, separators=(",", ":")).encode("utf-8")
    json_padding = (4 - len(json_bytes) % 4) % 4
    json_bytes += b" " * json_padding

    bin_padding = (4 - len(bin_data) % 4) % 4
    bin_data += b"\x00" * bin_padding

    total_length = 12 + 8 + len(json_bytes) + 8 + len(bin_data)

    glb = bytearray()
    glb += struct.pack("<I", 0x46546C67)
    glb += struct.pack("<I", 2)
    glb += struct.pack("<I", total_length)
    glb += struct.pack("<I", len(json_bytes))
    glb += struct.pack("<I", 0x4E4F534A)
    glb += json_bytes
    glb += struct.pack("<I", len(bin_data))
    glb += struct.pack("<I", 0x004E4942)
    glb += bin_data

    return bytes(glb)


@app.get("/defaults")
async def get_defaults():
    return DEFAULT_CONFIG


@app.post("/profile")
async def get_profile(config: StaircaseConfig):
    try:
        result = _compute(config)
        return JSONResponse(profile_to_dict(result))
    except InvalidSpec as e:
        print(f"[API] Rejected staircase: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/validate")
async def validate_staircase(config: StaircaseConfig):
    """Advisory building-regulation issues; an empty list means none were found."""
    try:
        result = _compute(config)
        return {"issues": StairRegsValidator.check_result(result), "stats": stair_stats(result)}
    except InvalidSpec as e:
        print(f"[API] Rejected staircase: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/generate")
async def generate_staircase(config: StaircaseConfig):
    try:
        result = _compute(config)
        print(f"[API] Building concrete solid ({len(result.polygon)} profile vertices)...")
        stair = build_solid(result, scale=config.scale)

        with tempfile.TemporaryDirectory() as temp_dir:
            gltf_path = os.path.join(temp_dir, "staircase_output.gltf")
            export_gltf(stair, gltf_path)
            glb_bytes = pack_glb(gltf_path)

        payload = profile_to_dict(result, scale=config.scale)
        payload["glb"] = base64.b64encode(glb_bytes).decode("ascii")
        return JSONResponse(payload)

    except InvalidSpec as e:
        print(f"[API] Rejected staircase: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/export/dxf")
async def export_dxf_file(config: StaircaseConfig):
    """Generates a DXF elevation: the profile outline plus dimension lines and labels."""
    try:
        result = _compute(config)

        doc = ezdxf.new()
        doc.layers.add("PROFILE", color=7)
        doc.layers.add("DIMENSIONS", color=1)
        doc.layers.add("LABELS", color=1)
        msp = doc.modelspace()

        msp.add_lwpolyline(list(result.polygon), dxfattribs={'layer': 'PROFILE'})

        for dim in result.annotations:
            # Width runs along the extrusion axis, out of the elevation plane
            if dim.start[2] != dim.end[2]:
                continue
            aci = DIMENSION_STYLE[dim.color]["aci"]
            msp.add_line(dim.start[:2], dim.end[:2],
                         dxfattribs={'layer': 'DIMENSIONS', 'color': aci})
            mid = ((dim.start[0] + dim.end[0]) / 2, (dim.start[1] + dim.end[1]) / 2)
            msp.add_text(dim.label, dxfattribs={
                'layer': 'LABELS',
                'height': 5,
                'color': aci,
            }).set_placement(mid)

        dxf_buffer = io.StringIO()
        doc.write(dxf_buffer)

        return Response(
            content=dxf_buffer.getvalue(),
            media_type="application/dxf",
            headers={"Content-Disposition": "attachment; filename=staircase_elevation.dxf"}
        )

    except InvalidSpec as e:
        print(f"[API] Rejected staircase: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
