from __future__ import annotations

import pytest

from ptt_reader.errors import ParseInconsistency
from ptt_reader.http_client import HttpClient, HttpConfig
from ptt_reader.ptt_client import PttClient


class _DummyHttp(HttpClient):
    def __init__(self):
        super().__init__(HttpConfig(timeout_sec=1.0, user_agent="test"))


def _client() -> PttClient:
    return PttClient("https://www.ptt.cc", _DummyHttp())


HOT_BOARDS_HTML = """
<html><body><div class="b-list-container">
  <div class="b-ent">
    <a class="board" href="/bbs/Gossiping/index.html">
      <div class="board-name">Gossiping</div>
      <div class="board-nuser"><span class="hl f6">12345</span></div>
      <div class="board-class">綜合</div>
      <div class="board-title">◎[八卦]亂講</div>
    </a>
  </div>
  <div class="b-ent">
    <a class="board" href="/bbs/C_Chat/index.html">
      <div class="board-name">C_Chat</div>
      <div class="board-nuser"><span class="hl f3">2048</span></div>
      <div class="board-class">閒談</div>
      <div class="board-title">◎[希洽]閒聊</div>
    </a>
  </div>
  <div class="b-ent">
    <a class="board" href="/bbs/Quiet">
      <div class="board-name">Quiet</div>
      <div class="board-nuser">99</div>
      <div class="board-class">其他</div>
      <div class="board-title">◎安靜</div>
    </a>
  </div>
</div></body></html>
"""

BOARD_HTML = """
<html><body>
  <div class="btn-group btn-group-paging">
    <a class="btn wide" href="/bbs/Gossiping/index1.html">最舊</a>
    <a class="btn wide" href="/bbs/Gossiping/index39119.html">‹ 上頁</a>
    <a class="btn wide disabled">下頁 ›</a>
    <a class="btn wide" href="/bbs/Gossiping/index.html">最新</a>
  </div>
  <div class="r-list-container">
    <div class="r-ent">
      <div class="nrec"><span class="hl f1">爆</span></div>
      <div class="title"><a href="/bbs/Gossiping/M.1700000000.A.B5C.html">[問卦] 一</a></div>
      <div class="meta"><div class="author">alice</div><div class="date"> 1/16</div></div>
    </div>
    <div class="r-ent">
      <div class="nrec"><span class="hl f3">87</span></div>
      <div class="title">(本文已被刪除) [bob]</div>
      <div class="meta"><div class="author">-</div><div class="date"> 1/16</div></div>
    </div>
    <div class="r-ent">
      <div class="nrec"></div>
      <div class="title"><a href="/bbs/Gossiping/M.1700000002.A.111.html">Re: [問卦] 三</a></div>
      <div class="meta"><div class="author">carol</div><div class="date"> 1/17</div></div>
    </div>
  </div>
</body></html>
"""

POST_HTML = """
<html><body>
<div id="main-content" class="bbs-screen bbs-content"><div class="article-metaline"><span class="article-meta-tag">作者</span><span class="article-meta-value">alice (Alice)</span></div><div class="article-metaline-right"><span class="article-meta-tag">看板</span><span class="article-meta-value">Gossiping</span></div><div class="article-metaline"><span class="article-meta-tag">標題</span><span class="article-meta-value">[問卦] 測試</span></div><div class="article-metaline"><span class="article-meta-tag">時間</span><span class="article-meta-value">Thu Jan 16 10:00:00 2020</span></div>
第一行
第二行

--
<span class="f2">※ 發信站: 批踢踢實業坊(ptt.cc), 來自: 1.2.3.4 (臺灣)
</span><span class="f2">※ 文章網址: https://www.ptt.cc/bbs/Gossiping/M.1.A.2.html
</span><span class="f2">※ 編輯: alice (1.2.3.4 臺灣), 01/16/2020 10:05:00
</span><div class="push"><span class="hl push-tag">推 </span><span class="f3 hl push-userid">bob</span><span class="f3 push-content">: 好文</span><span class="push-ipdatetime"> 01/16 10:01
</span></div><div class="push"><span class="f1 hl push-tag">噓 </span><span class="f3 hl push-userid">carol</span><span class="f3 push-content">: 不同意</span><span class="push-ipdatetime"> 01/16 10:02
</span></div></div>
</body></html>
"""

ARCHIVE_HTML = """
<html><body>
  <div class="m-ent"><div class="title">◆ <a href="/man/Gossiping/D8C7/index.html">精華一</a></div></div>
  <div class="m-ent"><div class="title">◇ <a href="/man/Gossiping/D8C7/M.1.A.2.html">文章</a></div></div>
  <div class="m-ent"><div class="title">◇ (本文已被刪除)</div></div>
</body></html>
"""


def test_parse_hot_boards_html_zips_fields_by_position():
    boards = _client()._parse_hot_boards_html(HOT_BOARDS_HTML)

    assert [b.board_name for b in boards] == ["Gossiping", "C_Chat", "Quiet"]
    assert [b.board_class for b in boards] == ["綜合", "閒談", "其他"]
    assert boards[0].board_title == "[八卦]亂講"
    assert [b.board_rate for b in boards] == [12345, 2048, 99]
    assert [b.board_level for b in boards] == [1, 5, 4]
    assert [b.board_href for b in boards] == ["Gossiping", "C_Chat", ""]
    assert len({b.id for b in boards}) == 3


def test_parse_group_boards_html_keeps_numeric_group_segment():
    html = """
    <div class="b-ent"><a class="board" href="/cls/3655">
      <div class="board-name">1HotBoard</div><div class="board-class">熱門</div>
      <div class="board-title">◎熱門看板</div></a></div>
    <div class="b-ent"><a class="board" href="/bbs/Test/index.html">
      <div class="board-name">Test</div><div class="board-class">測試</div>
      <div class="board-title">◎測試</div></a></div>
    """
    boards = _client()._parse_group_boards_html(html)

    assert [b.board_href for b in boards] == ["3655", ""]
    assert boards[0].board_title == "熱門看板"


def test_parse_board_items_reads_rows_in_document_order():
    items = _client()._parse_board_items(BOARD_HTML)

    assert len(items) == 3
    assert [i.title for i in items] == ["[問卦] 一", "(本文已被刪除) [bob]", "Re: [問卦] 三"]
    assert [i.href for i in items] == [
        "Gossiping/M.1700000000.A.B5C",
        "",
        "Gossiping/M.1700000002.A.111",
    ]
    assert [i.author for i in items] == ["alice", "-", "carol"]
    assert [i.date for i in items] == ["1/16", "1/16", "1/17"]
    assert [i.rate for i in items] == [-1, 87, 0]
    assert [i.level for i in items] == [1, 3, 4]


def test_parse_board_items_raises_on_misaligned_field():
    html = BOARD_HTML.replace('<div class="author">carol</div>', "")

    with pytest.raises(ParseInconsistency) as exc:
        _client()._parse_board_items(html)

    assert exc.value.field == "author"
    assert exc.value.expected == 3
    assert exc.value.actual == 2


def test_parse_current_id_reads_second_pager_button():
    assert _client()._parse_current_id(BOARD_HTML) == "39119"
    assert _client()._parse_current_id("<html><body></body></html>") == ""


def test_parse_post_html_extracts_meta_article_and_trailer():
    post = _client()._parse_post_html(POST_HTML, "Gossiping/M.1.A.2")

    assert post.page == "Gossiping/M.1.A.2"
    assert post.need18up is False
    assert post.author == "alice (Alice)"
    assert post.title == "[問卦] 測試"
    assert post.time == 1579140000000
    assert post.board == "Gossiping"
    assert post.article == "第一行\n第二行"
    assert post.from_ip == "1.2.3.4"
    assert post.from_country == "臺灣"
    assert post.edited == "01/16/2020 10:05:00"


def test_parse_post_html_extracts_comments():
    comments = _client()._parse_post_html(POST_HTML, "Gossiping/M.1.A.2").comments

    assert [(c.tag, c.user, c.content, c.time) for c in comments] == [
        ("推", "bob", "好文", "01/16 10:01"),
        ("噓", "carol", "不同意", "01/16 10:02"),
    ]
    assert comments[0].id != comments[1].id


def test_parse_post_html_tolerates_missing_fields():
    html = '<div id="main-content">no header\nno signature</div>'
    post = _client()._parse_post_html(html, "Test/M.1.A.1")

    assert post.author == ""
    assert post.time == 0
    assert post.board == ""
    assert post.article == ""
    assert post.from_ip == ""
    assert post.from_country == ""
    assert post.edited == ""
    assert post.comments == ()


def test_extract_article_drops_first_line_and_signature():
    article = _client()._extract_article("metaline\nBody text\n--\nsignature")
    assert article == "Body text"


def test_extract_article_keeps_inner_separators():
    article = _client()._extract_article("meta\na -- b\nc\n--\nsig")
    assert article == "a -- b\nc"


def test_parse_time_returns_zero_for_unparsable_text():
    assert _client()._parse_time("not a date") == 0
    assert _client()._parse_time("") == 0


def test_parse_archive_html_extracts_content_and_relative_path():
    entries = _client()._parse_archive_html(ARCHIVE_HTML, "Gossiping")

    assert [e.content for e in entries] == ["◆ 精華一", "◇ 文章", "◇ (本文已被刪除)"]
    assert [e.href for e in entries] == ["D8C7", "", ""]


def test_parsing_is_repeatable():
    first = _client()._parse_board_items(BOARD_HTML)
    second = _client()._parse_board_items(BOARD_HTML)
    assert first == second


def test_parse_post_html_builds_hashable_post():
    post = _client()._parse_post_html(POST_HTML, "Gossiping/M.1.A.2")

    assert isinstance(post.comments, tuple)
    assert hash(post) == hash(_client()._parse_post_html(POST_HTML, "Gossiping/M.1.A.2"))


def test_parse_hot_boards_html_raises_on_misaligned_field():
    html = HOT_BOARDS_HTML.replace('<div class="board-class">閒談</div>', "")

    with pytest.raises(ParseInconsistency) as exc:
        _client()._parse_hot_boards_html(html)

    assert (exc.value.field, exc.value.expected, exc.value.actual) == ("board_class", 3, 2)


def test_parse_hot_boards_html_raises_on_extra_field_nodes():
    html = HOT_BOARDS_HTML.replace(
        '<div class="board-name">Quiet</div>',
        '<div class="board-name">Quiet</div><div class="board-nuser">1</div>',
    )

    with pytest.raises(ParseInconsistency) as exc:
        _client()._parse_hot_boards_html(html)

    assert (exc.value.field, exc.value.expected, exc.value.actual) == ("board_rate", 3, 4)


def test_parse_group_boards_html_raises_on_misaligned_field():
    html = """
    <div class="b-ent"><a class="board" href="/cls/3655">
      <div class="board-name">1HotBoard</div><div class="board-class">熱門</div>
      <div class="board-title">◎熱門看板</div></a></div>
    <div class="b-ent"><a class="board" href="/cls/3656">
      <div class="board-name">Test</div><div class="board-class">測試</div></a></div>
    """

    with pytest.raises(ParseInconsistency) as exc:
        _client()._parse_group_boards_html(html)

    assert (exc.value.field, exc.value.expected, exc.value.actual) == ("board_title", 2, 1)
