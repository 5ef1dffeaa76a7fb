# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import sys
from typing import Optional
from flask import Flask, jsonify, request
from pydantic import ValidationError
from ..clients.errors import UpstreamError
from ..clients.tmdb import TMDBClient
from ..clients.transmission import TransmissionClient
from ..core.config import Config
from ..services.link_service import LinkService
from ..services.match_service import MatchService
from .schemas import AddTorrentRequest, ApplyRequest, ApplySessionRequest, CheckExistingRequest


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


class Server:
    def __init__(self, config_path: str = "config.yaml", config: Optional[Config] = None):
        # Refuses to start without a library root (ConfigError)
        self.config = config or Config.load(config_path)
        configure_logging(self.config.verbose)
        self.logger = logging.getLogger("bonarr.server.app")

        self.app = Flask(__name__)

        # Clients
        self.tmdb = TMDBClient(self.config.tmdb_api_key, read_access_token=self.config.tmdb_read_access_token)
        self.transmission = TransmissionClient(
            self.config.transmission_url,
            self.config.transmission_username,
            self.config.transmission_password,
        )

        # Services
        self.link_service = LinkService(self.config)
        self.match_service = MatchService(self.tmdb, self.transmission)

        self._setup_routes()

    def _session_payload(self, session):
        return {
            "show": session.show.model_dump(mode="json"),
            "season_number": session.season.season_number,
            "torrent": {
                "id": session.torrent.id,
                "name": session.torrent.name,
                "download_dir": session.torrent.download_dir,
            },
            "matched_count": session.store.matched_count,
            "total_count": session.store.total_count,
            "matches": [r.model_dump(mode="json") for r in session.store.records],
        }

    def _setup_routes(self):
        app = self.app

        @app.errorhandler(UpstreamError)
        def handle_upstream(e):
            self.logger.error(f"Upstream failure: {e}")
            return jsonify({"error": str(e)}), 502

        @app.errorhandler(ValidationError)
        def handle_validation(e):
            return jsonify({"error": str(e)}), 400

        @app.route("/api/config")
        def get_config():
            cfg = self.config
            return jsonify({
                "library_root": str(cfg.library_root),
                "torrent_filter_path": cfg.torrent_filter_path,
                "transmission_url": cfg.transmission_url,
                "tmdb_api_key": "********" if cfg.tmdb_api_key else "",
                "verbose": cfg.verbose,
            })

        @app.route("/api/torrents")
        def list_torrents():
            torrents = self.transmission.get_torrents(self.config.torrent_filter_path)
            return jsonify([t.model_dump(mode="json", exclude={"files"}) for t in torrents])

        @app.route("/api/torrents", methods=["POST"])
        def add_torrent():
            body = AddTorrentRequest.model_validate(request.get_json(silent=True) or {})
            added = self.transmission.add_torrent(body.filename, body.download_dir)
            self.logger.info(f"[User Action] Added torrent: {added.get('name')}")
            return jsonify(added), 201

        @app.route("/api/search")
        def search_shows():
            query = request.args.get("q", "").strip()
            if not query:
                return jsonify({"error": "Query parameter 'q' is required"}), 400
            try:
                page = int(request.args.get("page", 1))
            except ValueError:
                return jsonify({"error": "page must be an integer"}), 400
            return jsonify(self.tmdb.search_tv(query, page))

        matches_url = "/api/shows/<int:show_id>/seasons/<int:season_number>/torrents/<int:torrent_id>/matches"

        @app.route(matches_url)
        def get_matches(show_id, season_number, torrent_id):
            # Manual overrides survive a reload; POST starts over
            session = self.match_service.get_or_start_session(show_id, season_number, torrent_id)
            return jsonify(self._session_payload(session))

        @app.route(matches_url, methods=["POST"])
        def refresh_matches(show_id, season_number, torrent_id):
            session = self.match_service.start_session(show_id, season_number, torrent_id)
            return jsonify(self._session_payload(session))

        @app.route(matches_url + "/<int:episode_number>", methods=["POST"])
        def assign_match(show_id, season_number, torrent_id, episode_number):
            data = request.get_json(silent=True) or {}
            try:
                record, next_episode = self.match_service.assign(
                    show_id, season_number, torrent_id, episode_number, data.get("file_name")
                )
            except KeyError as e:
                return jsonify({"error": str(e.args[0])}), 404
            except ValueError as e:
                return jsonify({"error": str(e)}), 400

            payload = {"match": record.model_dump(mode="json")}
            if data.get("advance"):
                payload["next_episode"] = next_episode.model_dump(mode="json") if next_episode else None
            return jsonify(payload)

        @app.route("/api/apply", methods=["POST"])
        def apply_matches():
            body = ApplyRequest.model_validate(request.get_json(silent=True) or {})
            result = self.link_service.apply_matches(
                body.matches, body.show_name, body.show_id, body.season_number, body.torrent_path
            )
            return jsonify(result.model_dump(mode="json"))

        @app.route("/api/apply-session", methods=["POST"])
        def apply_session():
            body = ApplySessionRequest.model_validate(request.get_json(silent=True) or {})
            try:
                session = self.match_service.get_session(body.show_id, body.season_number, body.torrent_id)
            except KeyError as e:
                return jsonify({"error": str(e.args[0])}), 404

            result = self.link_service.apply_matches(
                session.store.records,
                session.show.name,
                session.show.id,
                session.season.season_number,
                session.torrent.download_dir,
            )
            # Keep the session around so failed episodes can be corrected
            if result.success:
                self.match_service.end_session(body.show_id, body.season_number, body.torrent_id)
            return jsonify(result.model_dump(mode="json"))

        @app.route("/api/check-existing", methods=["POST"])
        def check_existing():
            body = CheckExistingRequest.model_validate(request.get_json(silent=True) or {})
            results = self.link_service.check_existing_files(
                body.show_name, body.show_id, body.season_number, body.episodes
            )
            return jsonify([r.model_dump(mode="json") for r in results])

    def run(self):
        self.logger.info(f"Library root: {self.config.library_root}")
        self.app.run(host=self.config.server_host, port=self.config.server_port)


if __name__ == "__main__":
    server = Server()
    server.run()
