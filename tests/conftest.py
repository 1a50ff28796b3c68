import pytest

from kwildb_query import Builder, Table


class FakeConnector:
    """Records every call and answers with a canned reply."""

    def __init__(self, reply=None):
        self.reply = reply if reply is not None else {"rowCount": 0, "rows": []}
        self.calls = []

    async def prepared_statement(self, sql, values, sync):
        self.calls.append((sql, list(values), sync))
        return self.reply

    async def query(self, sql, sync):
        self.calls.append((sql, None, sync))
        return self.reply

    async def get_moat_funding(self):
        return {"funding": 42}

    async def get_moat_debit(self):
        return {"debit": 7}


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def table(connector):
    return Table(connector, "t")


@pytest.fixture
def builder():
    created = []

    def factory(config, secret_key):
        conn = FakeConnector()
        conn.config = config
        conn.secret_key = secret_key
        created.append(conn)
        return conn

    db = Builder("s3cret", connector_factory=factory)
    db.created = created
    return db
