import sys
import importlib
import os
import io


# Fail loudly and helpfully if required Python packages are missing.
def _require_modules(mods):
    missing = []
    for m in mods:
        try:
            importlib.import_module(m)
        except ImportError:
            missing.append(m)
    if missing:
        print("\nERROR: Missing required Python package(s): {}".format(', '.join(missing)))
        print("Install them with:")
        print("  python -m pip install -e .")
        sys.exit(1)


_require_modules(['flask', 'numpy'])

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from flask import Flask, request, send_file, jsonify

from TRE.SMM.constants import FRAMES_FILE
from TRE.SFM.frame_sync import frames_to_stream
from TRE.SPM.processor import process_capture

app = Flask(__name__)


def _report(result):
    samples, demod, sync = result.samples, result.demod, result.sync
    report = {
        'samples': samples.sample_count,
        'ch0_count': samples.ch0_count,
        'ch1_count': samples.ch1_count,
        'markers': demod.marker_count,
        'bits': int(demod.bits.shape[0]),
        'invalid_intervals': demod.invalid_count,
        'frames': [
            {
                'index': f.frame_index,
                'bit_offset': f.bit_offset,
                'bit_length': f.bit_length,
                'gap_count': f.gap_count,
                'hex': f.data.hex(),
            }
            for f in sync.frames
        ],
        'partial_matches': [
            {'position': m.position, 'score': m.score, 'data': m.observed}
            for m in sync.partial_matches
        ],
        'summary': sync.summary(),
    }
    if result.diagnostics is not None:
        report['debug'] = {
            'first_bits': result.diagnostics.first_bits,
            'first_32': result.diagnostics.first_32,
        }
    return report


@app.route('/capture/process', methods=['POST'])
def process():
    if 'capture' not in request.files:
        return jsonify({'error': 'missing file field `capture`'}), 400
    raw = request.files['capture'].read()
    track_gaps = request.args.get('track_gaps', '0') in ('1', 'true', 'yes')
    try:
        result = process_capture(raw, track_gaps=track_gaps)
    except Exception as e:
        return jsonify({'error': str(e)}), 500

    if request.args.get('format') == 'bin':
        return send_file(
            io.BytesIO(frames_to_stream(result.sync.frames)),
            mimetype='application/octet-stream',
            as_attachment=True,
            download_name=FRAMES_FILE,
        )
    return jsonify(_report(result))


@app.route('/capture/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})


if __name__ == '__main__':
    # Run on localhost:5000 by default
    app.run(host='127.0.0.1', port=5000)
