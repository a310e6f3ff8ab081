"""Stand-ins for asyncpg pools and prepared statements"""
from contextlib import asynccontextmanager
from types import SimpleNamespace


class FakeStatement:

    def __init__(self, rows, status, fields, error=None):
        self.rows = rows
        self.status = status
        self.fields = fields
        self.error = error
        self.args = None

    async def fetch(self, *args):
        self.args = args
        if self.error:
            raise self.error
        return self.rows

    def get_statusmsg(self):
        return self.status

    def get_attributes(self):
        return [SimpleNamespace(name=name) for name in self.fields]


class FakePool:
    """Hands out the given statements in order; the last one repeats"""

    def __init__(self, *statements):
        self.statements = list(statements)
        self.prepared = []

    @asynccontextmanager
    async def acquire(self):
        yield self

    async def prepare(self, sql):
        self.prepared.append(sql)
        index = min(len(self.prepared), len(self.statements)) - 1
        return self.statements[index]
