import pytest

from vellum.render import ChannelIndexBuilder, page_name
from vellum.render.channel_index import count_data_files, shard_labels

from .factories import make_channel, make_server, message, write_json


def test_page_name():
    assert page_name(42, 0) == "42"
    assert page_name(42, 3) == "42_3"
    assert page_name("42", 1) == "42_1"


@pytest.mark.parametrize("amount,expected", [
    (0, []),
    (2, []),
    (3, ["general_1"]),
    (5, ["general_1", "general_2", "general_3"]),
])
def test_shard_labels(amount, expected):
    assert shard_labels("general", amount) == expected


def test_base_chunk_only_yields_no_shards(export_root):
    server_dir = make_server(export_root)
    make_channel(server_dir, chunks={0: [message("1", "a")]})
    index = ChannelIndexBuilder().build(server_dir)
    assert count_data_files(server_dir / "42") == 2
    assert index.entries[0].pages == [("42", "general")]


def test_five_data_files_yield_three_shards(export_root):
    server_dir = make_server(export_root)
    make_channel(server_dir, chunks={i: [message("1", "a")] for i in range(4)})
    index = ChannelIndexBuilder().build(server_dir)
    assert index.entries[0].pages == [
        ("42", "general"),
        ("42_1", "general_1"),
        ("42_2", "general_2"),
        ("42_3", "general_3"),
    ]


def test_count_includes_any_json_named_entry(export_root):
    server_dir = make_server(export_root)
    channel_dir = make_channel(server_dir, chunks={0: [], 5: []})
    # non-contiguous chunk numbers still count as one shard each
    index = ChannelIndexBuilder().build(server_dir)
    assert count_data_files(channel_dir) == 3
    assert index.entries[0].pages[1] == ("42_1", "general_1")


def test_entries_sorted_by_channel_id(export_root):
    server_dir = make_server(export_root)
    make_channel(server_dir, "300", name="late")
    make_channel(server_dir, "20", name="early")
    index = ChannelIndexBuilder().build(server_dir)
    assert [e.channel_id for e in index.entries] == [20, 300]
    assert set(index.channels) == {"20", "300"}


def test_malformed_and_missing_channel_metadata_are_skipped(export_root, caplog):
    server_dir = make_server(export_root)
    make_channel(server_dir, "1", name="good")
    (server_dir / "2").mkdir()
    bad = server_dir / "3" / "channel.json"
    bad.parent.mkdir()
    bad.write_text("{broken", encoding="utf-8")
    write_json(server_dir / "4" / "channel.json", {"Id": "4"})

    index = ChannelIndexBuilder().build(server_dir)
    assert list(index.channels) == ["1"]
    assert "Invalid channel data for 3" in caplog.text


def test_links_escape_labels(export_root):
    server_dir = make_server(export_root)
    make_channel(server_dir, name="<b>loud</b>")
    links = ChannelIndexBuilder().build(server_dir).render_links()
    assert str(links) == '<a href="./42.html">&lt;b&gt;loud&lt;/b&gt;</a><br>\n'
