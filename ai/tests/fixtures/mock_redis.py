import redis


class MockRedisClient:
    def __init__(self):
        self.store = {}

    def get(self, k):
        return self.store.get(k)

    def set(self, k, v, ex=None):
        self.store[k] = v

    def delete(self, k):
        self.store.pop(k, None)

    def ping(self):
        return True

    def exists(self, k):
        return 1 if k in self.store else 0

    def flushall(self):
        self.store.clear()


class FullRedisClient(MockRedisClient):
    """Accepts reads but rejects every write, like a full or blocked store."""

    def set(self, k, v, ex=None):
        raise redis.ResponseError("OOM command not allowed when used memory > 'maxmemory'")


class DownRedisClient(MockRedisClient):
    def ping(self):
        raise redis.ConnectionError('Error 111 connecting to redis:6379. Connection refused.')


class UndecodableRedisClient(MockRedisClient):
    """Holds a value that is not valid UTF-8, as decode_responses would see it."""

    def get(self, k):
        raise UnicodeDecodeError('utf-8', b'\xff\xfe', 0, 1, 'invalid start byte')
