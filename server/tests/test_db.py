from hanumant.core.db import engine_options


def test_sqlite_connections_are_shared_across_threads():
    assert engine_options("sqlite+pysqlite:///:memory:") == {"connect_args": {"check_same_thread": False}}


def test_server_databases_ping_pooled_connections():
    assert engine_options("postgresql+psycopg2://library:secret@db/hanumant") == {"pool_pre_ping": True}
