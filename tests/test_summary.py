from sustainity.services.summary import numeric_columns, row_labels, summarize


def test_scenario_price_column_with_non_numeric_gap():
    chart = summarize([{"name": "Apple", "price": "1.5"}, {"name": "Banana", "price": "abc"}])
    assert chart.labels == ["Row 1", "Row 2"]
    assert [series.label for series in chart.datasets] == ["price"]
    assert chart.datasets[0].data == [1.5, None]


def test_eligibility_is_decided_by_first_row_only():
    records = [{"amount": "10.5", "code": "N/A"}, {"amount": "N/A", "code": "7"}]
    chart = summarize(records)
    assert [series.label for series in chart.datasets] == ["amount"]
    assert chart.datasets[0].data == [10.5, None]


def test_first_row_null_or_blank_excludes_column():
    assert numeric_columns({"a": None, "b": "", "c": "3", "d": 4, "e": True}) == ["c", "d"]


def test_numbers_and_numeric_strings_mix():
    chart = summarize([{"x": 1}, {"x": "2.5"}, {"x": None}, {}])
    assert chart.datasets[0].data == [1.0, 2.5, None, None]


def test_colors_rotate_hue_per_series():
    chart = summarize([{"a": "1", "b": "2", "c": "3"}])
    assert [series.background_color for series in chart.datasets] == [
        "hsl(0, 70%, 50%)",
        "hsl(60, 70%, 50%)",
        "hsl(120, 70%, 50%)",
    ]


def test_ui_elements_become_gaps_in_chart():
    chart = summarize([{"a": "1"}, {"a": {"$$typeof": "el"}}])
    assert chart.datasets[0].data == [1.0, None]


def test_no_chart_data_for_empty_or_non_numeric_datasets():
    assert summarize([]) is None
    assert summarize([{"name": "Apple"}, {"name": "7"}]) is None


def test_row_labels_are_positional():
    assert row_labels(3) == ["Row 1", "Row 2", "Row 3"]
