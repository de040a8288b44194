"""Tests for fallback and placeholder content."""

from roadmap_ai.generation import fallbacks


class TestFallbackRoadmap:
    def test_template_shape(self) -> None:
        roadmap = fallbacks.fallback_roadmap("UX Researcher")
        assert roadmap["title"] == "UX Researcher"
        assert [s["title"] for s in roadmap["sections"]] == [
            "Foundation",
            "Intermediate",
            "Advanced",
            "Specialization",
        ]
        assert all(len(s["subtasks"]) == 3 for s in roadmap["sections"])

    def test_ids(self) -> None:
        roadmap = fallbacks.fallback_roadmap("X")
        ids = [t["id"] for s in roadmap["sections"] for t in s["subtasks"]]
        assert ids == ["1", "2", "3", "4", "5", "6", "7", "8", "9", "", "", ""]

    def test_returns_fresh_copies(self) -> None:
        first = fallbacks.fallback_roadmap("X")
        first["sections"].pop()
        assert len(fallbacks.fallback_roadmap("X")["sections"]) == 4


class TestPlaceholders:
    def test_resources(self) -> None:
        resources = fallbacks.placeholder_resources()
        assert len(resources) == 5
        assert set(resources[0]) == {"title", "url", "type", "description"}

    def test_description_long_enough(self) -> None:
        text = fallbacks.placeholder_description("A", "B")
        assert len(text) >= 100
        assert text.startswith("# A")

    def test_templated_lists_use_subtask_title(self) -> None:
        assert all("Joins" in e for e in fallbacks.placeholder_exercises("Joins"))
        assert all("Joins" in c for c in fallbacks.placeholder_criteria("Joins"))

    def test_description_texts(self) -> None:
        assert fallbacks.fallback_roadmap_description("Go").startswith("# Go")
        assert '"Basics"' in fallbacks.fallback_section_description("Go", "Basics")
        assert "Channels" in fallbacks.fallback_subtask_summary("Go", "Channels")


class TestLearningPathTemplates:
    def test_introductory_lessons(self) -> None:
        lessons = fallbacks.introductory_lessons("Joins", "Data Analyst")
        assert len(lessons) == 3
        assert lessons[0]["sublessons"][0]["title"] == "Getting Started with Joins"

    def test_extended_lesson_caps_sublessons(self) -> None:
        template = {"content": "x" * 150, "sublessons": [{"title": "a"}] * 5}
        lesson = fallbacks.extended_lesson(2, "Joins", template)
        assert len(lesson["sublessons"]) == 3
        assert "x" * 100 + "..." in lesson["content"]
        assert "x" * 101 not in lesson["content"]

    def test_standard_test_answers_are_options(self) -> None:
        test = fallbacks.standard_path_test("Joins", "SQL")
        assert len(test["questions"]) == 5
        for question in test["questions"]:
            assert question["correctAnswer"] in question["options"]

    def test_titles_with_braces_are_kept_verbatim(self) -> None:
        test = fallbacks.standard_path_test("{x}", "SQL")
        assert test["title"] == "Comprehensive {x} Assessment"
        assert test["questions"][0]["question"] == "What is the main purpose of {x}?"
