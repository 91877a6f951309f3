import pytest

from espaces.models import normalize_property
from espaces.scripts.run_search import _print_listing, build_filter_state, main, parse_args


def test_build_filter_state_from_args():
    args = parse_args(
        [
            "--search", "Lyon",
            "--type", "bureau_prive",
            "--type", "coworking",
            "--amenity", "wifi",
            "--price-range", "range2",
        ]
    )
    state = build_filter_state(args)

    assert state.normalized_search_term == "lyon"
    assert state.selected_types == ["bureau_prive", "coworking"]
    assert state.selected_amenities == ["wifi"]
    assert state.selected_price_range_id == "range2"
    assert state.active_filter_count == 4


def test_defaults_build_empty_state():
    state = build_filter_state(parse_args([]))
    assert state.is_applied is False
    assert state.search_term == ""


def test_unknown_price_range_exits_with_error():
    with pytest.raises(SystemExit) as exc_info:
        main(["--price-range", "range42", "--base-url", "http://127.0.0.1:1/api"])
    assert exc_info.value.code == 1


def test_listing_line_uses_euro(capsys):
    record = normalize_property({"id": 4, "title": "Plateau Sfax", "city": "Sfax", "price": 1200.5})
    _print_listing(record, as_json=False)

    out = capsys.readouterr().out
    assert "1200.5€" in out
    assert "TND" not in out
