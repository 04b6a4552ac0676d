"""HTTP server for signed object content URLs."""

import logging
import secrets
from typing import Any

from aiohttp import hdrs, web

from flatdir.config import ExplorerConfig
from flatdir.exceptions import InvalidPathException, NotFoundException
from flatdir.store.local import LocalObjectStore
from flatdir.utils.url_signer import CONTENT_ROUTE, UrlSigner

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", LocalObjectStore)
SIGNER_KEY = web.AppKey("url_signer", UrlSigner)

routes = web.RouteTableDef()


@routes.get(CONTENT_ROUTE + "{key:.+}")
async def handle_content(request: web.Request) -> web.Response:
    """Serve the content of one object.

    Query: signature, timestamp, nonce (as produced by UrlSigner.sign_url)
    """
    store = request.app[STORE_KEY]
    url_signer = request.app[SIGNER_KEY]
    key = request.match_info["key"]

    try:
        timestamp = int(request.query.get("timestamp", "0"))
    except ValueError:
        timestamp = 0
    if not url_signer.verify(
        key,
        request.query.get("signature", ""),
        timestamp,
        request.query.get("nonce", ""),
    ):
        logger.info(f"Rejected content request for {key}: invalid signature")
        return web.json_response({"error": "Invalid signature"}, status=403)

    try:
        metadata = await store.get_metadata(key)
        data = await store.read_object(key)
    except InvalidPathException as err:
        return web.json_response({"error": str(err)}, status=400)
    except NotFoundException:
        return web.json_response({"error": f"{key} not found"}, status=404)

    return web.Response(body=data, headers={hdrs.CONTENT_TYPE: metadata.content_type})


def create_app(store: LocalObjectStore, url_signer: UrlSigner) -> web.Application:
    app = web.Application()
    app[STORE_KEY] = store
    app[SIGNER_KEY] = url_signer
    app.add_routes(routes)
    return app


def run(args: Any) -> None:
    config = ExplorerConfig.load(args.config_dir)
    if args.storage_dir:
        config.storage_dir = args.storage_dir
    url_signer = config.server.url_signer()
    if url_signer is None:
        logger.warning(
            "No secret_key configured; links issued by other processes will be rejected"
        )
        url_signer = UrlSigner(secrets.token_hex(32))
    store = LocalObjectStore(
        config.storage_path, url_signer=url_signer, base_url=config.server.public_url()
    )
    logger.info(f"Serving {config.storage_path} on {config.server.public_url()}")
    web.run_app(
        create_app(store, url_signer), host=config.server.host, port=config.server.port
    )
