#!/usr/bin/env python3
"""
Acórdão Drafter
Drafts appellate rulings from a first-instance judgment and its appeals
"""

import json
import logging
import shutil
import uuid
from datetime import datetime
from pathlib import Path

from flask import Flask, jsonify, request, send_file
from werkzeug.utils import secure_filename

from acordao_drafter.config import load_settings
from acordao_drafter.documents.composer import compose
from acordao_drafter.documents.docx_writer import DOCX_MIMETYPE, DOWNLOAD_NAME, write_document
from acordao_drafter.errors import ExtractionError, MissingInputError, ServiceFailureError
from acordao_drafter.models import AppealPair, CaseData, UploadedDocument
from acordao_drafter.processors.extraction_processor import ExtractionProcessor, validate_inputs
from acordao_drafter.utils.file_parser import allowed_file


logger = logging.getLogger(__name__)

settings = load_settings()

app = Flask(__name__)
app.config['SETTINGS'] = settings
app.config['CASES_DIR'] = settings.cases_dir

DOC_TYPES = {'sentence', 'appeal', 'response'}

STATUS_IDLE = 'idle'
STATUS_PROCESSING = 'processing'
STATUS_REVIEW = 'review'
STATUS_ERROR = 'error'
STATUS_COMPLETE = 'complete'

ERROR_STATUS_CODES = {
    'MissingInput': 400,
    'MalformedResponse': 422,
    'UnreadableDocument': 422,
    'ServiceFailure': 502,
}


def cases_dir() -> Path:
    path = Path(app.config['CASES_DIR'])
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_case(case_id: str) -> dict:
    """Load case data"""
    case_file = cases_dir() / secure_filename(case_id) / 'case.json'
    if case_file.exists():
        with open(case_file, 'r', encoding='utf-8') as f:
            return json.load(f)
    return None


def save_case(case_id: str, data: dict):
    """Save case data"""
    case_dir = cases_dir() / secure_filename(case_id)
    case_dir.mkdir(exist_ok=True)
    with open(case_dir / 'case.json', 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def case_inputs(case: dict):
    sentence = UploadedDocument(**case['sentence']) if case.get('sentence') else None
    pairs = [AppealPair.from_dict(p) for p in case.get('appeal_pairs', [])]
    return sentence, pairs


def discard_upload(document: dict):
    """Delete a replaced or removed upload from disk"""
    path = Path(document['path'])
    if path.exists():
        path.unlink()
        logger.info("Removed upload %s", path.name)


def make_processor() -> ExtractionProcessor:
    cfg = app.config['SETTINGS']
    return ExtractionProcessor(
        api_key=cfg.api_key,
        model=cfg.model,
        max_output_tokens=cfg.max_output_tokens,
        pdf_mode=cfg.pdf_mode,
    )


def error_response(error: ExtractionError):
    status_code = ERROR_STATUS_CODES.get(error.kind, 500)
    if isinstance(error, ServiceFailureError) and error.is_auth_error:
        status_code = 401
    return jsonify(error.to_dict()), status_code


# ============ ROUTES ============

@app.route('/')
def index():
    return jsonify({
        'service': 'acordao-drafter',
        'accepted_types': sorted(['pdf', 'docx', 'txt']),
        'download_name': DOWNLOAD_NAME,
    })


@app.route('/case/new', methods=['POST'])
def create_case():
    """Create a new drafting case"""
    case_id = str(uuid.uuid4())[:8]
    case_data = {
        'id': case_id,
        'created': datetime.now().isoformat(),
        'status': STATUS_IDLE,
        'sentence': None,
        'appeal_pairs': [AppealPair(id='1').to_dict()],
        'case_data': None,
        'error': None,
    }

    case_dir = cases_dir() / case_id
    case_dir.mkdir(exist_ok=True)
    (case_dir / 'uploads').mkdir(exist_ok=True)

    save_case(case_id, case_data)
    logger.info("Created case %s", case_id)

    return jsonify({'case_id': case_id})


@app.route('/case/<case_id>')
def case_state(case_id):
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404
    return jsonify(case)


@app.route('/case/<case_id>/upload', methods=['POST'])
def upload_document(case_id):
    """Upload the sentence, an appeal or a response"""
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404

    if 'file' not in request.files:
        return jsonify({'error': 'No file provided'}), 400

    file = request.files['file']
    doc_type = request.form.get('doc_type', 'sentence')
    pair_id = request.form.get('pair_id', '1')

    if doc_type not in DOC_TYPES:
        return jsonify({'error': f'Unknown doc_type: {doc_type}'}), 400

    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    if not allowed_file(file.filename):
        return jsonify({'error': 'File type not allowed. Use PDF, DOCX, or TXT'}), 400

    # Save file
    filename = secure_filename(file.filename)
    prefix = doc_type if doc_type == 'sentence' else f"{doc_type}_{secure_filename(pair_id)}"
    file_path = cases_dir() / secure_filename(case_id) / 'uploads' / f"{prefix}_{filename}"
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file.save(file_path)

    document = UploadedDocument(
        path=str(file_path),
        filename=filename,
        mime_type=file.mimetype or None,
    ).to_dict()

    if doc_type == 'sentence':
        holder = case
        slot = 'sentence'
    else:
        holder = next((p for p in case['appeal_pairs'] if p['id'] == pair_id), None)
        if holder is None:
            holder = AppealPair(id=pair_id).to_dict()
            case['appeal_pairs'].append(holder)
        slot = doc_type

    previous = holder.get(slot)
    if previous and Path(previous['path']) != file_path:
        discard_upload(previous)
    holder[slot] = document

    save_case(case_id, case)

    return jsonify({
        'success': True,
        'doc_type': doc_type,
        'pair_id': None if doc_type == 'sentence' else pair_id,
        'filename': filename,
    })


@app.route('/case/<case_id>/upload', methods=['DELETE'])
def remove_document(case_id):
    """Remove one uploaded file; the pair itself stays"""
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404

    doc_type = request.args.get('doc_type', 'sentence')
    pair_id = request.args.get('pair_id', '1')

    if doc_type not in DOC_TYPES:
        return jsonify({'error': f'Unknown doc_type: {doc_type}'}), 400

    if doc_type == 'sentence':
        holder = case
        slot = 'sentence'
    else:
        holder = next((p for p in case['appeal_pairs'] if p['id'] == pair_id), None)
        if holder is None:
            return jsonify({'error': 'Pair not found'}), 404
        slot = doc_type

    if not holder.get(slot):
        return jsonify({'error': 'No file uploaded'}), 404

    discard_upload(holder[slot])
    holder[slot] = None
    save_case(case_id, case)
    return jsonify({'success': True, 'doc_type': doc_type,
                    'pair_id': None if doc_type == 'sentence' else pair_id})


@app.route('/case/<case_id>/pair/<pair_id>', methods=['DELETE'])
def remove_pair(case_id, pair_id):
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404

    pairs = case.get('appeal_pairs', [])
    if not any(p['id'] == pair_id for p in pairs):
        return jsonify({'error': 'Pair not found'}), 404
    if len(pairs) <= 1:
        return jsonify({'error': 'At least one appeal pair is required'}), 400

    for pair in pairs:
        if pair['id'] == pair_id:
            for doc_type in ('appeal', 'response'):
                if pair.get(doc_type):
                    discard_upload(pair[doc_type])

    case['appeal_pairs'] = [p for p in pairs if p['id'] != pair_id]
    save_case(case_id, case)
    return jsonify({'success': True, 'appeal_pairs': case['appeal_pairs']})


@app.route('/case/<case_id>/extract', methods=['POST'])
async def extract_case(case_id):
    """Run the model extraction; uploads are kept whatever the outcome"""
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404

    sentence, pairs = case_inputs(case)
    try:
        validate_inputs(sentence, pairs)
    except MissingInputError as e:
        return error_response(e)

    case['status'] = STATUS_PROCESSING
    case['error'] = None
    save_case(case_id, case)

    try:
        data = await make_processor().extract(sentence, pairs)
    except ExtractionError as e:
        logger.warning("Extraction failed for case %s: %s", case_id, e)
        case['status'] = STATUS_ERROR
        case['error'] = e.to_dict()
        save_case(case_id, case)
        return error_response(e)
    except Exception:
        logger.exception("Unexpected failure extracting case %s", case_id)
        case['status'] = STATUS_ERROR
        case['error'] = ExtractionError("Unexpected failure").to_dict()
        save_case(case_id, case)
        raise

    case['case_data'] = data.to_dict()
    case['status'] = STATUS_REVIEW
    save_case(case_id, case)

    return jsonify(case['case_data'])


@app.route('/case/<case_id>/data', methods=['GET'])
def get_case_data(case_id):
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404
    if not case.get('case_data'):
        return jsonify({'error': 'Nothing extracted yet'}), 404
    return jsonify(case['case_data'])


@app.route('/case/<case_id>/data', methods=['PUT'])
def update_case_data(case_id):
    """Store the user's reviewed text"""
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404
    if not case.get('case_data'):
        return jsonify({'error': 'Nothing extracted yet'}), 409

    try:
        data = CaseData.from_dict(request.get_json(silent=True))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    case['case_data'] = data.to_dict()
    save_case(case_id, case)
    return jsonify(case['case_data'])


@app.route('/case/<case_id>/generate', methods=['POST'])
def generate_document(case_id):
    """Generate the draft acórdão as a Word document"""
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404
    if not case.get('case_data'):
        return jsonify({'error': 'Nothing extracted yet'}), 409

    blocks = compose(CaseData.from_dict(case['case_data']))
    output_path = write_document(blocks, cases_dir() / secure_filename(case_id) / DOWNLOAD_NAME)

    case['status'] = STATUS_COMPLETE
    case['output_file'] = str(output_path)
    save_case(case_id, case)

    return jsonify({
        'success': True,
        'blocks': len(blocks),
        'download_url': f'/case/{case_id}/download'
    })


@app.route('/case/<case_id>/download')
def download_document(case_id):
    case = get_case(case_id)
    if not case:
        return "Case not found", 404

    output_path = cases_dir() / secure_filename(case_id) / DOWNLOAD_NAME
    if not output_path.exists():
        return "Document not generated yet", 404

    return send_file(
        output_path,
        as_attachment=True,
        download_name=DOWNLOAD_NAME,
        mimetype=DOCX_MIMETYPE
    )


@app.route('/case/<case_id>', methods=['DELETE'])
def reset_case(case_id):
    """Discard the case: uploads, extracted data and generated document"""
    case = get_case(case_id)
    if not case:
        return jsonify({'error': 'Case not found'}), 404

    shutil.rmtree(cases_dir() / secure_filename(case_id))
    logger.info("Reset case %s", case_id)
    return jsonify({'success': True})


if __name__ == '__main__':
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    print("\n" + "="*60)
    print("ACÓRDÃO DRAFTER")
    print("="*60)
    print(f"\nServer starting at: http://127.0.0.1:5003")
    print("\nUpload the sentence and the appeals, then review the extracted draft.")
    print("Press Ctrl+C to stop.\n")

    app.run(debug=True, host='127.0.0.1', port=5003)
