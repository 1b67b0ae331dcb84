from protean.domain import Domain
from sqlalchemy import create_engine

_RDBMS_PROVIDERS = ("sqlite", "postgresql")


def _register_tables(domain: Domain, provider) -> None:
    """Load every DAO stored by ``provider`` so its table joins the metadata.

    Event-sourced aggregates (and the entities inside them) live in the
    event store and have no table.
    """
    for _, aggregate_record in domain.registry.aggregates.items():
        meta = aggregate_record.cls.meta_
        if meta.provider == provider.name and not meta.is_event_sourced:
            domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

    for _, projection_record in domain.registry.projections.items():
        if projection_record.cls.meta_.provider == provider.name:
            domain.repository_for(projection_record.cls)._dao  # noqa: B018


def setup_db(domain: Domain):
    """Setup database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _RDBMS_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                _register_tables(domain, provider)
                provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in _RDBMS_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                _register_tables(domain, provider)
                provider._metadata.drop_all(engine)
