from __future__ import annotations

import codecs
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from tableprojector.domain.errors import UpstreamFetchError


class Transport(ABC):
    """Abstract transport that yields the raw bytes of one resource."""

    @abstractmethod
    def stream(self) -> Iterator[bytes]:
        pass


class FsFileTransport(Transport):
    def __init__(self, path: str, *, chunk_size: int = 65536):
        self.path = path
        self.chunk_size = chunk_size

    def stream(self) -> Iterator[bytes]:
        with open(self.path, "rb") as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk


class UrlTransport(Transport):
    def __init__(self, url: str, headers: Optional[Dict[str, str]] = None, chunk_size: int = 64 * 1024):
        self.url = url
        self.headers = dict(headers or {})
        self.chunk_size = chunk_size

    def stream(self) -> Iterator[bytes]:
        req = Request(self.url, headers=self.headers)

        try:
            resp = urlopen(req)
        except HTTPError as e:
            body = e.read()
            raise HttpStatusError(self.url, e.code, body) from e
        except URLError as e:
            raise UpstreamFetchError(f"failed to fetch {self.url}: {e.reason}") from e
        except OSError as e:
            raise UpstreamFetchError(f"failed to fetch {self.url}: {e}") from e

        with resp:
            while True:
                try:
                    chunk = resp.read(self.chunk_size)
                except OSError as e:
                    raise UpstreamFetchError(f"failed to read response from {self.url}: {e}") from e
                if not chunk:
                    break
                yield chunk


class HttpStatusError(UpstreamFetchError):
    def __init__(self, url: str, status: int, body: bytes = b"") -> None:
        self.url = url
        self.status = status
        self.body = body
        super().__init__(f"failed to fetch {url}: HTTP {status}")


def read_all_text(chunks: Iterable[bytes], encoding: str = "utf-8") -> str:
    decoder = codecs.getincrementaldecoder(encoding)()
    parts: list[str] = []
    for chunk in chunks:
        parts.append(decoder.decode(chunk))
    parts.append(decoder.decode(b"", final=True))
    return "".join(parts)
