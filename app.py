#!/usr/bin/env python3
"""
Flask Web Application for Call Graph Analyzer
Provides REST API endpoints that turn call trees into percentage-ranked dependency graphs.
"""

from flask import Flask, request, jsonify
from werkzeug.utils import secure_filename
import os
import tempfile
from callgraph_analyzer import CallGraphAnalyzer, GraphConfig
from callgraph_analyzer.core.types import METRIC_TYPES
from callgraph_analyzer.formatters import metric_label
from callgraph_analyzer.web import prepare_results, prepare_batch_results

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 500 * 1024 * 1024
app.config['UPLOAD_FOLDER'] = tempfile.gettempdir()

ALLOWED_EXTENSIONS = {'json'}

def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _extract_call_stack(payload):
    """Find the list of root calls in a JSON payload."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return None
    for key in ('call_stack', 'callStack', 'calls'):
        if key in payload:
            return payload[key]
    return None


@app.route('/api/metrics', methods=['GET'])
def metrics_api():
    """List the metric dimensions a graph can be built for."""
    return jsonify({
        'metrics': [{'name': metric, 'label': metric_label(metric)} for metric in METRIC_TYPES],
        'defaults': GraphConfig().to_dict()
    })


@app.route('/api/call-graph', methods=['POST'])
def call_graph_api():
    """
    API endpoint to build a call graph from a JSON body.
    Accepts: application/json with fields:
      - 'call_stack': list of root call records (required)
      - 'config': {metric, minPercentage, showUserFunctions, showInternalFunctions,
                   showMethods, minDurationMs} (optional, snake_case also accepted)
    Returns: JSON with summary, nodes and edges
    """
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({'error': 'Request body must be JSON'}), 400
    
    call_stack = _extract_call_stack(payload)
    if not isinstance(call_stack, list):
        return jsonify({'error': 'No call_stack provided'}), 400
    
    config_data = payload.get('config') if isinstance(payload, dict) else None
    config = GraphConfig.from_dict(config_data)
    
    try:
        analyzer = CallGraphAnalyzer(config)
        graph = analyzer.build_graph(call_stack)
        return jsonify(prepare_results(graph, config))
    
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/call-graph/upload', methods=['POST'])
def call_graph_upload_api():
    """
    API endpoint to build call graphs from an uploaded file.
    Accepts: multipart/form-data with fields:
      - 'file': call tree JSON file
      - 'metric': wall_time|io_wait|cpu|memory|network (optional, default: 'wall_time')
      - 'min_percentage': float (optional, default: 0.5)
      - 'show_user_functions', 'show_internal_functions', 'show_methods': 'true'|'false'
      - 'min_duration_ms': float (optional)
    Returns: JSON with one result per call tree found in the file
    """
    if 'file' not in request.files:
        return jsonify({'error': 'No file provided'}), 400
    
    file = request.files['file']
    
    if not file.filename:
        return jsonify({'error': 'No file selected'}), 400
    
    if not allowed_file(file.filename):
        return jsonify({'error': 'Invalid file type. Only JSON files are allowed.'}), 400
    
    config = GraphConfig.from_dict(request.form.to_dict())
    
    try:
        filename = secure_filename(file.filename)
        filepath = os.path.join(app.config['UPLOAD_FOLDER'], filename)
        file.save(filepath)
        
        analyzer = CallGraphAnalyzer(config)
        try:
            trees = analyzer.file_processor.process_traces_file(filepath)
        finally:
            os.remove(filepath)
        
        graphs = {trace_id: analyzer.build_graph(call_stack) for trace_id, call_stack in trees.items()}
        
        results = prepare_batch_results(graphs, config)
        results['filename'] = filename
        return jsonify(results)
    
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/call-stack-path', methods=['POST'])
def call_stack_path_api():
    """
    API endpoint returning the path from the root to a selected call.
    Accepts: application/json with 'call_stack' and 'function', optional
    'class', 'file' and 'line'.
    Returns: JSON list of calls from the root down to the selected call
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    
    call_stack = _extract_call_stack(payload)
    function = payload.get('function')
    if not isinstance(call_stack, list) or not function:
        return jsonify({'error': 'call_stack and function are required'}), 400
    
    try:
        analyzer = CallGraphAnalyzer(GraphConfig.from_dict(payload.get('config')))
        path = analyzer.call_stack_path(
            call_stack,
            function,
            class_name=payload.get('class'),
            file=payload.get('file'),
            line=payload.get('line')
        )
        
        nodes = []
        for depth, node in enumerate(path):
            entry = node.to_dict(include_children=False)
            entry['depth'] = depth
            nodes.append(entry)
        return jsonify({'path': nodes})
    
    except Exception as e:
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5001)
