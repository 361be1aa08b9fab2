#!/usr/bin/env python3
"""
Pixel Recolor API Server
Upload an image, get it back with one color replaced.
"""

import os
import logging
import uuid
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS
from werkzeug.utils import secure_filename

# --- Centralized Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
    datefmt='%H:%M:%S'
)

from .models.errors import EngineError
from .models.image import Image
from .services.image_service import ImageService
from .services.recolor_service import RecolorService

app = Flask(__name__)
CORS(app)  # Enable CORS for frontend communication

# Configuration
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "data/temp_uploads")
RESULTS_FOLDER = os.getenv("RESULTS_FOLDER", "data/api_results")
ALLOWED_EXTENSIONS = set(os.getenv("ALLOWED_EXTENSIONS", "png,jpg,jpeg,gif,bmp,webp").split(","))
MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_SIZE_MB", "100")) * 1024 * 1024

app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

# Initialize services
image_service = ImageService()
recolor_service = RecolorService(image_service=image_service)

logger = logging.getLogger(__name__)


def allowed_file(filename: str) -> bool:
    """Check if file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


@app.route('/api/recolor', methods=['POST'])
def recolor_image():
    """
    Multipart form:
        image        – the picture
        target       – hex color to replace
        replacement  – hex color to write
        tolerance    – optional float in [0, 1]
    """
    if 'image' not in request.files:
        return jsonify({'success': False, 'message': 'No image provided'}), 400

    file = request.files['image']
    if file.filename == '' or not allowed_file(file.filename):
        return jsonify({'success': False, 'message': 'Missing or unsupported file'}), 400

    try:
        tolerance = request.form.get('tolerance')
        params = recolor_service.build_request(
            request.form.get('target', ''),
            request.form.get('replacement', ''),
            float(tolerance) if tolerance not in (None, '') else None,
        )
    except ValueError as e:
        return jsonify({'success': False, 'message': f'Invalid parameters: {e}'}), 400

    # Save upload temporarily so it decodes through the image repository
    filename = secure_filename(file.filename)
    temp_path = Path(UPLOAD_FOLDER) / f"upload_{uuid.uuid4().hex}_{filename}"
    temp_path.parent.mkdir(parents=True, exist_ok=True)
    file.save(str(temp_path))

    try:
        source = image_service.load(temp_path)
    except (FileNotFoundError, ValueError) as e:
        return jsonify({'success': False, 'message': f'Could not decode image: {e}'}), 400
    finally:
        # Clean up temp file
        if temp_path.exists():
            temp_path.unlink()

    try:
        new_bitmap, replaced = recolor_service.recolor_counted(source.bitmap, params)
    except EngineError as e:
        return jsonify({'success': False, 'message': str(e)}), 400
    result = Image(bitmap=new_bitmap, original=source.bitmap)

    stem = Path(secure_filename(file.filename)).stem or "image"
    filename = f"{stem}_recolored_{uuid.uuid4().hex[:8]}.png"
    Path(RESULTS_FOLDER).mkdir(parents=True, exist_ok=True)
    image_service.save_scratch_copy(result, Path(RESULTS_FOLDER) / filename)

    logger.info(f"Recolored {file.filename}: {replaced} pixels replaced")
    return jsonify({
        'success': True,
        'width': result.bitmap.width,
        'height': result.bitmap.height,
        'replaced_pixels': replaced,
        'tolerance': params.tolerance,
        'image': image_service.to_png_base64(result),
        'url': f"/api/image/{filename}",
    })


@app.route('/api/image/<filename>')
def serve_image(filename):
    """Serve recolored images."""
    image_path = Path(RESULTS_FOLDER) / secure_filename(filename)
    if image_path.exists():
        return send_file(image_path.resolve(), mimetype='image/png')
    return jsonify({'error': 'Image not found'}), 404


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'message': 'Pixel Recolor API is running',
        'workers': recolor_service.engine.max_workers,
    })


@app.errorhandler(413)
def too_large(e):
    """Handle file too large error."""
    return jsonify({'error': f'File too large. Maximum size is {MAX_CONTENT_LENGTH // (1024 * 1024)}MB.'}), 413


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({'error': 'Internal server error'}), 500


def main():
    print("🚀 Starting Pixel Recolor API Server...")
    print(f"📁 Upload directory: {UPLOAD_FOLDER}")
    print(f"📁 Results directory: {RESULTS_FOLDER}")
    print(f"🔧 Max upload size: {MAX_CONTENT_LENGTH // (1024*1024)}MB")
    app.run(host=os.getenv("API_HOST", "127.0.0.1"), port=int(os.getenv("API_PORT", "5000")))


if __name__ == '__main__':
    main()
