"""Tests for rule-based field inference and record-draft merging."""

import pytest

from agrivoice.inference import (
    CROP_TYPE_LABELS,
    CROP_TYPE_RULES,
    WORK_TYPE_LABELS,
    WORK_TYPE_RULES,
    FieldInferenceEngine,
    InferredFields,
    RecordDraft,
    apply_field_suggestion,
    apply_inferred,
    first_match,
)


class TestWorkType:
    @pytest.mark.parametrize("text,expected", [
        ("播種しました", "seeding"),
        ("種まき", "seeding"),
        ("植え付け完了", "planting"),
        ("肥料をまいた", "fertilizing"),
        ("農薬散布", "pesticide"),
        ("草取り", "weeding"),
        ("稲刈り", "harvesting"),
        ("水路の確認", "inspection"),
    ])
    def test_keywords(self, engine, text, expected):
        assert engine.infer(text).work_type == expected

    def test_first_rule_wins_regardless_of_text_position(self, engine):
        # Weeding appears first in the text, but seeding is earlier in rule order
        results = {engine.infer("除草のあと播種").work_type for _ in range(5)}
        assert results == {"seeding"}

    def test_fertilizer_spraying_is_fertilizing(self, engine):
        # "施肥" outranks "散布"
        assert engine.infer("施肥 散布").work_type == "fertilizing"

    def test_no_keyword(self, engine):
        assert engine.infer("今日は晴れ").work_type is None


class TestCropType:
    @pytest.mark.parametrize("text,expected", [
        ("稲", "rice"),
        ("米", "rice"),
        ("小麦", "wheat"),
        ("トウモロコシ", "corn"),
        ("大豆", "soybean"),
        ("ジャガイモ", "potato"),
        ("トマト", "tomato"),
        ("キャベツ", "cabbage"),
        ("レタス", "lettuce"),
    ])
    def test_keywords(self, engine, text, expected):
        assert engine.infer(text).crop_type == expected

    def test_first_rule_wins(self, engine):
        assert engine.infer("レタスと稲").crop_type == "rice"

    def test_no_crop(self, engine):
        assert engine.infer("播種").crop_type is None


class TestFieldName:
    @pytest.mark.parametrize("text", ["3号圃場", "3号", "3圃場", "今日は3号圃場で作業"])
    def test_field_markers(self, engine, text):
        assert engine.infer(text).field_name == "Field 3"

    def test_first_occurrence_is_used(self, engine):
        assert engine.infer("12号圃場と4号圃場").field_name == "Field 12"

    def test_full_width_digits(self, engine):
        assert engine.infer("３号圃場").field_name == "Field 3"

    def test_localized_template(self):
        engine = FieldInferenceEngine(field_name_template="第{number}圃場")
        assert engine.infer("7号").field_name == "第7圃場"

    def test_template_requires_number(self):
        with pytest.raises(ValueError):
            FieldInferenceEngine(field_name_template="Field")

    def test_digits_without_marker(self, engine):
        assert engine.infer("5kg").field_name is None

    def test_very_long_digit_run(self, engine):
        fields = engine.infer("1" * 5000 + "号圃場")
        assert fields.field_name == "Field " + "1" * 5000

    def test_leading_zeros_are_dropped(self, engine):
        assert engine.infer("03号圃場").field_name == "Field 3"
        assert engine.infer("0号").field_name == "Field 0"

    @pytest.mark.parametrize("text", ["3場", "3圃"])
    def test_partial_markers_are_not_fields(self, engine, text):
        assert engine.infer(text).field_name is None


class TestQuantity:
    @pytest.mark.parametrize("text,expected", [
        ("3.5 kg", "3.5kg"),
        ("3.5kg", "3.5kg"),
        ("2ha", "2ha"),
        ("10a", "10a"),
        ("1反", "1反"),
        ("30坪", "30坪"),
        ("5キロ", "5キロ"),
        ("2 ヘクタール", "2ヘクタール"),
        ("20アール", "20アール"),
    ])
    def test_number_and_unit(self, engine, text, expected):
        assert engine.infer(text).quantity == expected

    def test_no_unit(self, engine):
        assert engine.infer("3号圃場で作業").quantity is None

    def test_first_pair_is_used(self, engine):
        assert engine.infer("5kg と 2ha").quantity == "5kg"


class TestInferredFields:
    def test_end_to_end_with_normalizer(self, normalizer, engine):
        raw = "いね はしゅ 3号圃場 5きろ"
        normalized = normalizer.normalize(raw)
        fields = engine.infer(normalized, raw_text=raw)

        assert fields.work_type == "seeding"
        assert fields.crop_type == "rice"
        assert fields.field_name == "Field 3"
        assert fields.quantity == "5kg"
        assert fields.raw_text == raw
        assert fields.normalized_text == "稲 播種 3号圃場 5kg"

    def test_nothing_found_is_not_an_error(self, engine):
        fields = engine.infer("")
        assert fields.matched() == {}
        assert fields.raw_text == ""

    def test_raw_text_defaults_to_normalized(self, engine):
        assert engine.infer("稲").raw_text == "稲"

    def test_matched_omits_missing(self, engine):
        assert engine.infer("稲 5kg").matched() == {"crop_type": "rice", "quantity": "5kg"}

    def test_custom_rules(self):
        engine = FieldInferenceEngine(work_rules=[(("spray",), "pesticide")])
        assert engine.infer("SPRAY the field").work_type == "pesticide"

    def test_every_rule_value_has_a_label(self):
        assert {value for _, value in WORK_TYPE_RULES} == set(WORK_TYPE_LABELS)
        assert {value for _, value in CROP_TYPE_RULES} == set(CROP_TYPE_LABELS)

    def test_first_match_helper(self):
        rules = [(("a",), 1), (("b", "a"), 2)]
        assert first_match("ab", rules) == 1
        assert first_match("b", rules) == 2
        assert first_match("c", rules) is None


class TestRecordDraft:
    def test_matched_values_replace_draft(self):
        draft = RecordDraft(work_type="weeding", crop_type="wheat")
        fields = InferredFields(work_type="seeding", raw_text="x", normalized_text="x")
        merged = apply_inferred(draft, fields)
        assert merged.work_type == "seeding"
        assert merged.crop_type == "wheat"

    def test_missing_values_never_clear_draft(self):
        draft = RecordDraft(field_name="North Paddy", quantity="5kg")
        fields = InferredFields(raw_text="稲", normalized_text="稲", crop_type="rice")
        merged = apply_inferred(draft, fields)
        assert merged.field_name == "North Paddy"
        assert merged.quantity == "5kg"

    def test_raw_text_fills_empty_work_details(self):
        fields = InferredFields(raw_text="いね はしゅ", normalized_text="稲 播種")
        assert apply_inferred(RecordDraft(work_details="  "), fields).work_details == "いね はしゅ"

    def test_existing_work_details_are_kept(self):
        fields = InferredFields(raw_text="いね はしゅ", normalized_text="稲 播種")
        merged = apply_inferred(RecordDraft(work_details="手書きメモ"), fields)
        assert merged.work_details == "手書きメモ"

    def test_draft_is_not_mutated(self):
        draft = RecordDraft()
        apply_inferred(draft, InferredFields(raw_text="稲", normalized_text="稲", crop_type="rice"))
        assert draft.crop_type is None

    def test_field_suggestion(self):
        draft = RecordDraft(field_name="Field 3")
        assert apply_field_suggestion(draft, "North Paddy").field_name == "North Paddy"
        assert apply_field_suggestion(draft, None).field_name == "Field 3"
