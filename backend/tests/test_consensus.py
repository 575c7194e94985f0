"""
Tests for the rolling vote buffer used for multi-judge agreement
"""
from tkd_scoring.services.match import Vote, VoteBuffer


def test_add_counts_distinct_judges_for_the_pair():
    buf = VoteBuffer()
    assert buf.add(Vote(1, 'red', 'head', 10.0), 1000) == 1
    assert buf.add(Vote(1, 'red', 'head', 10.1), 1000) == 1
    assert buf.add(Vote(2, 'red', 'body', 10.2), 1000) == 1
    assert buf.add(Vote(2, 'red', 'head', 10.3), 1000) == 2
    assert len(buf) == 4


def test_add_prunes_relative_to_new_vote():
    """Votes older than the window drop out as soon as a newer vote arrives"""
    buf = VoteBuffer()
    buf.add(Vote(1, 'blue', 'tech', 10.0), 500)
    buf.add(Vote(2, 'red', 'body', 10.4), 500)
    buf.add(Vote(3, 'blue', 'tech', 10.6), 500)
    assert [v.judge for v in buf.votes()] == [2, 3]


def test_purge_only_removes_matching_pair():
    buf = VoteBuffer()
    buf.add(Vote(1, 'red', 'head', 1.0), 1000)
    buf.add(Vote(2, 'red', 'body', 1.0), 1000)
    buf.add(Vote(3, 'blue', 'head', 1.0), 1000)

    buf.purge('red', 'head')

    assert [(v.side, v.zone) for v in buf.votes()] == [('red', 'body'), ('blue', 'head')]


def test_votes_returns_a_copy():
    buf = VoteBuffer()
    buf.add(Vote(1, 'red', 'head', 1.0), 1000)
    snapshot = buf.votes()
    buf.clear()
    assert len(snapshot) == 1
    assert len(buf) == 0
