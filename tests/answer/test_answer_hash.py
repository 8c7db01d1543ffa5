"""Tests for the AnswerHash result record."""

import json

from mathcheck.answer.answer_hash import AnswerHash
from mathcheck.math.numeric import Real


class TestAnswerHashCreation:
    def test_defaults(self):
        ans = AnswerHash()
        assert ans.score == 0.0
        assert ans.correct is False
        assert ans.messages == []
        assert ans.type == "unknown"

    def test_score_must_be_in_range(self, assert_validation_error):
        assert_validation_error(AnswerHash, {"score": 1.5}, "score")
        assert_validation_error(AnswerHash, {"score": -0.1}, "score")


class TestAnswerHashUpdates:
    def test_set_score_clamps_and_sets_correct(self):
        ans = AnswerHash()
        ans.set_score(1.2)
        assert ans.score == 1.0
        assert ans.correct is True
        ans.set_score(0.5)
        assert ans.correct is False

    def test_add_message_skips_blanks_and_repeats(self):
        ans = AnswerHash()
        ans.add_message("Your first number is incorrect")
        ans.add_message("Your first number is incorrect")
        ans.add_message("   ")
        assert ans.messages == ["Your first number is incorrect"]

    def test_set_error(self):
        ans = AnswerHash(score=1.0, correct=True)
        ans.set_error("Unexpected ')'")
        assert ans.error_flag is True
        assert ans.error_message == "Unexpected ')'"
        assert ans.score == 0.0
        assert ans.messages == ["Unexpected ')'"]

    def test_is_blank(self):
        assert AnswerHash(original_student_ans="  \n").is_blank()
        assert not AnswerHash(original_student_ans="0").is_blank()


class TestAnswerHashOutput:
    def test_result(self):
        ans = AnswerHash(correct_ans="(-infinity, 3]", messages=["hint"])
        assert ans.result() == {"score": 0.0, "messages": ["hint"], "correct_value": "(-infinity, 3]"}

    def test_to_dict_is_json_serializable(self):
        def my_checker(correct, student, ans):
            return True

        ans = AnswerHash(
            correct_value=Real(3),
            student_value=Real(3),
            flags={"checker": my_checker, "limits": (0, 1), "ordered": False},
            metadata={"state": "score_computed", "test_points": [{"x": 0.5}]},
        )
        data = json.loads(json.dumps(ans.to_dict()))
        assert data["correct_value"] == "3"
        assert data["flags"] == {"checker": "my_checker", "limits": [0, 1], "ordered": False}
        assert data["metadata"]["test_points"] == [{"x": 0.5}]
