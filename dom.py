"""
DOM 查询封装：解析器只依赖 Document 这个小接口，
测试里可以换成任何实现同样方法的假文档。
"""
import re
from typing import List, Optional, Protocol
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

Node = Tag


class Document(Protocol):
    def query_all(self, selector: str, within: Optional[Node] = None) -> List[Node]: ...

    def query_first(self, selector: str, within: Optional[Node] = None) -> Optional[Node]: ...

    def text(self, node: Optional[Node]) -> str: ...

    def attr(self, node: Optional[Node], name: str) -> str: ...

    def next_sibling(self, node: Optional[Node]) -> Optional[Node]: ...


class SoupDocument:
    """
    基于 BeautifulSoup 的 Document 实现，选择器走 soupsieve 的 CSS 语法
    """

    def __init__(self, soup: BeautifulSoup):
        self._soup = soup

    def query_all(self, selector: str, within: Optional[Node] = None) -> List[Node]:
        root = within if within is not None else self._soup
        return root.select(selector)

    def query_first(self, selector: str, within: Optional[Node] = None) -> Optional[Node]:
        root = within if within is not None else self._soup
        return root.select_one(selector)

    def text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return node.get_text().strip()

    def attr(self, node: Optional[Node], name: str) -> str:
        if node is None:
            return ""
        value = node.get(name)
        if value is None:
            return ""
        # class 之类的多值属性会被 bs4 拆成列表
        if isinstance(value, list):
            return " ".join(value)
        return value.strip()

    def next_sibling(self, node: Optional[Node]) -> Optional[Node]:
        if node is None:
            return None
        return node.find_next_sibling()


def parse_document(markup: str) -> SoupDocument:
    return SoupDocument(BeautifulSoup(markup, "lxml"))


# ------------------------
# 小工具
# ------------------------
def id_from_href(href: str) -> str:
    """
    取链接路径的最后一段作为 id：
    '/watch/one-piece-100?ep=2' -> 'one-piece-100'
    查询串、锚点和结尾的 '/' 都会被忽略。
    """
    if not href:
        return ""
    href = href.strip()
    try:
        path = urlsplit(href).path
    except ValueError:
        # 比如 '//[bad/x-1' 这种坏掉的 IPv6 主机名，退回到按字符切
        path = href.split("?", 1)[0].split("#", 1)[0]
    return path.rstrip("/").rsplit("/", 1)[-1]


_LEADING_INT = re.compile(r"^\s*\+?(\d+)")


def parse_count(text: str) -> int:
    """
    取徽标文字开头的整数，没有数字时返回 0
    """
    m = _LEADING_INT.match(text or "")
    return int(m.group(1)) if m else 0
