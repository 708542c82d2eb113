import logging
from collections import Counter

from flask import Flask, jsonify, request

from .config import GatewayConfig
from .hash_ring import Ring

logger = logging.getLogger(__name__)


def _ring_state(ring):
    return {
        "nodes": sorted(ring.nodes()),
        "size": ring.size(),
        "virtual_nodes": ring.virtual_count(),
    }


def create_app(config=None, ring=None):
    if config is None:
        config = GatewayConfig.from_env()
    if ring is None:
        ring = Ring(config.replicas)
        ring.add(*config.nodes)

    app = Flask(__name__)
    app.config["GATEWAY"] = config
    app.config["RING"] = ring

    # --- CORS Headers ---
    @app.after_request
    def after_request(response):
        response.headers.add('Access-Control-Allow-Origin', '*')
        response.headers.add('Access-Control-Allow-Headers', 'Content-Type,Authorization')
        response.headers.add('Access-Control-Allow-Methods', 'GET,POST,DELETE,OPTIONS')
        return response

    # --- 1. ROUTE (Primary owner) ---
    @app.route('/route/<key>', methods=['GET'])
    def route_key(key):
        node = ring.get(key)
        if not node:
            return jsonify({"error": "No nodes available"}), 503
        return jsonify({"key": key, "node": node})

    # --- 2. REPLICAS (Preference list) ---
    @app.route('/replicas/<key>', methods=['GET'])
    def replica_nodes(key):
        raw_n = request.args.get('n')
        if raw_n is None:
            n = config.replication_factor
        else:
            try:
                n = int(raw_n)
            except ValueError:
                logger.warning("Rejected replica lookup for %s: n=%r", key, raw_n)
                return jsonify({"error": "n must be an integer"}), 400

        if ring.is_empty():
            return jsonify({"error": "No nodes available"}), 503
        return jsonify({"key": key, "nodes": ring.get_n(key, n)})

    # --- 3. MEMBERSHIP ---
    @app.route('/nodes', methods=['GET'])
    def list_nodes():
        return jsonify(_ring_state(ring))

    @app.route('/nodes', methods=['POST'])
    def add_nodes():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Expected a JSON object"}), 400

        nodes = data.get('nodes')
        if nodes is None and 'node' in data:
            nodes = [data['node']]
        if not isinstance(nodes, list) or not all(isinstance(n, str) for n in nodes):
            logger.warning("Rejected membership change: %r", data)
            return jsonify({"error": "nodes must be a list of strings"}), 400

        before = set(ring.nodes())
        ring.add(*nodes)
        joined = sorted(set(ring.nodes()) - before)
        if joined:
            logger.info("Joined ring: %s", joined)
        return jsonify(_ring_state(ring))

    @app.route('/nodes/<node>', methods=['DELETE'])
    def remove_node(node):
        was_member = node in ring.nodes()
        ring.remove(node)
        if was_member:
            logger.info("Left ring: %s", node)
        return jsonify(_ring_state(ring))

    # --- 4. MAP (Key distribution) ---
    @app.route('/map', methods=['GET'])
    def key_map():
        keys = [k for k in request.args.get('keys', '').split(',') if k]
        owners = {key: ring.get(key) for key in keys}
        counts = Counter(owners.values())
        return jsonify({
            "owners": owners,
            "counts": {node: counts.get(node, 0) for node in sorted(ring.nodes())},
        })

    return app


def main():
    config = GatewayConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(config)
    logger.info("Gateway routing over %d nodes", len(config.nodes))
    app.run(host=config.host, port=config.port)


if __name__ == '__main__':
    main()
