"""DI container: the composition root.

main.create_app attaches one Container per app to app.state; deps.py
resolves services from it. Tests override providers (store, payments)
before the app is built.
"""
from dependency_injector import containers, providers

from community_stream.config import Settings
from community_stream.providers import BasePayGateway, TrustingSignatureVerifier
from community_stream.realtime import SessionRegistry
from community_stream.services import (AccessEvaluator, CommunityStatsService,
                                       MessageBroadcaster, StreamService,
                                       UserService)
from community_stream.store import create_store


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings.from_env)

    store = providers.Singleton(create_store, settings)

    payments = providers.Singleton(
        lambda s: BasePayGateway(
            s.payments_api_url,
            s.payments_api_key,
            testnet=s.payments_testnet,
            timeout=s.payments_timeout,
        ),
        settings,
    )
    signature_verifier = providers.Singleton(TrustingSignatureVerifier)

    # One registry per app instance; every connection and broadcast shares it.
    session_registry = providers.Singleton(
        SessionRegistry,
        send_timeout=settings.provided.realtime_send_timeout,
    )

    stats_service = providers.Singleton(CommunityStatsService, store)
    access_evaluator = providers.Singleton(AccessEvaluator, store)
    user_service = providers.Singleton(UserService, store, stats_service, signature_verifier)
    stream_service = providers.Singleton(
        StreamService,
        store,
        stats_service,
        payments,
        community_address=settings.provided.community_address,
    )
    message_broadcaster = providers.Singleton(
        MessageBroadcaster,
        store,
        session_registry,
        access_evaluator,
    )


def init_container(settings: Settings | None = None) -> Container:
    """Create a container, optionally pinned to explicit settings."""
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    return container
