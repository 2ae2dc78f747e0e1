# server/app.py — identification relay
import base64
import logging

import openai
from flask import Flask, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from config.settings import LOG_LEVEL, MAX_UPLOAD_BYTES, OPENAI_API_KEY, RELAY_HOST, RELAY_PORT
from tools.openai_utils import ModelResponseError, identify_plant_image

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = Flask(__name__)
# base64 JSON bodies are ~4/3 of the image size
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES * 2


def _error(status, error, details=None):
    body = {"error": error}
    if details:
        body["details"] = details
    return jsonify(body), status


@app.errorhandler(RequestEntityTooLarge)
def too_large(_e):
    return _error(413, "image too large", "Image size should be less than 5MB")


@app.get("/healthz")
def healthz():
    return jsonify({"ok": True})


def _read_image():
    """Return (base64 string, mime type) from a multipart or JSON request, or (None, None)."""
    if "image" in request.files:
        f = request.files["image"]
        data = f.read()
        if not data:
            return None, None
        return base64.b64encode(data).decode("ascii"), f.mimetype or "image/jpeg"

    body = request.get_json(silent=True) or {}
    image = body.get("image")
    if not isinstance(image, str) or not image:
        return None, None
    # Accept a full data URI as well as bare base64
    if image.startswith("data:") and "," in image:
        header, image = image.split(",", 1)
        return image, header[5:].split(";")[0] or "image/jpeg"
    return image, body.get("mimeType") or "image/jpeg"


# Identify a plant from an uploaded image
@app.post("/api/identify")
def identify():
    image_b64, mime_type = _read_image()
    if not image_b64:
        return _error(400, "no image")

    api_key = request.headers.get("X-Api-Key") or OPENAI_API_KEY
    if not api_key:
        return _error(401, "missing API key", "Send your key in the X-Api-Key header")

    try:
        plant = identify_plant_image(image_b64, mime_type, api_key)
    except openai.AuthenticationError:
        return _error(401, "invalid API key")
    except ModelResponseError as e:
        logger.warning("Unusable model response: %s", e)
        return _error(502, "unreadable model response", str(e))
    except openai.OpenAIError as e:
        logger.error("Model call failed: %r", e)
        return _error(502, "model unavailable", str(e))

    logger.info("Identified %s", plant.get("name"))
    return jsonify({"plantData": plant})


if __name__ == "__main__":
    app.run(host=RELAY_HOST, port=RELAY_PORT, debug=False)
# To run: python -m server.app  (or FLASK_APP=server/app.py flask run --port=5050)
