import io

from flask import Flask, jsonify, request, send_file

from partlab.assembly import generate_part
from partlab.dimensions import camera_quadrant, dimensions, visible_dimensions
from partlab.errors import InvalidParameter, PartLabError, UnknownPart
from partlab.export import ExportFormat, export_filename, export_mesh
from partlab.library.catalog import ALL, get_catalog
from partlab.library.models import PartDescriptor, Transform

MIMETYPES = {
    ExportFormat.STL: "model/stl",
    ExportFormat.OBJ: "model/obj",
}

app = Flask(__name__)


@app.errorhandler(PartLabError)
def handle_partlab_error(exc):
    status = 404 if isinstance(exc, UnknownPart) else 400
    return jsonify({"error": exc.kind, "message": str(exc)}), status


def _get_json():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidParameter("request body must be a JSON object")
    return data


def _object_field(data, key):
    value = data[key]
    if not isinstance(value, dict):
        raise InvalidParameter(f"'{key}' must be a JSON object")
    return value


def _descriptor_from_request(data):
    """
    リクエストから部品記述子を組み立てる。

    "part" に記述子全体、または "id" にカタログIDを指定し、
    "parameters" / "material" / "position" / "rotation" / "scale" で上書きできる。
    """
    if "part" in data:
        return PartDescriptor.from_json(_object_field(data, "part"))
    part_id = data.get("id")
    if not part_id:
        raise InvalidParameter("request needs 'part' or 'id'")
    part = get_catalog().get(part_id)
    if data.get("parameters"):
        part = part.with_parameters(**_object_field(data, "parameters"))
    if data.get("material"):
        part = part.with_material(**_object_field(data, "material"))
    overrides = {key: data[key] for key in ("position", "rotation", "scale") if key in data}
    if overrides:
        current = part.transform.to_json()
        current.update(overrides)
        part = part.with_changes(transform=Transform.from_json(current))
    return part


@app.route("/api/parts", methods=["GET"])
def list_parts():
    query = request.args.get("q", "")
    category = request.args.get("category", ALL)
    parts = get_catalog().search(query, category)
    return jsonify({"parts": [part.to_json() for part in parts]})


@app.route("/api/parts/<part_id>", methods=["GET"])
def get_part(part_id):
    return jsonify(get_catalog().get(part_id).to_json())


@app.route("/api/preview", methods=["POST"])
def preview():
    data = _get_json()
    part = _descriptor_from_request(data)
    result = generate_part(part)
    dims = dimensions(part, unit=data.get("unit"))
    camera = data.get("camera")
    if camera is not None:
        dims = visible_dimensions(camera_quadrant(camera), dims)

    mesh = result.mesh
    return jsonify(
        {
            "id": result.part_id,
            "positionY": result.position_y,
            "vertices": mesh.vertices.tolist(),
            "faces": mesh.faces.tolist(),
            "colors": mesh.visual.vertex_colors.tolist(),
            "curves": [curve.tolist() for curve in result.curves],
            "dimensions": [dim.to_json() for dim in dims],
        }
    )


@app.route("/api/export", methods=["POST"])
def export():
    data = _get_json()
    part = _descriptor_from_request(data)
    fmt = ExportFormat.parse(data.get("format", "stl"))
    payload = export_mesh(generate_part(part).mesh, fmt)
    return send_file(
        io.BytesIO(payload),
        mimetype=MIMETYPES.get(fmt, "application/octet-stream"),
        as_attachment=True,
        download_name=export_filename(part.name, fmt),
    )


if __name__ == "__main__":
    app.run(debug=True)
