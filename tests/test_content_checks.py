from __future__ import annotations

from services.content_checks import validate_generated_content

CLEAN = (
    "The shuttle leaves San Jose each morning. The drive follows Route 1 north. Coffee farms line the road.\n\n"
    "La Fortuna sits below Arenal Volcano. Hot springs are close to town. Waterfalls are a short drive away."
)

def test_clean_copy_has_no_issues():
    assert validate_generated_content(CLEAN) == []

def test_empty_copy():
    assert validate_generated_content("") == ["Content is empty."]

def test_each_problem_is_reported():
    issues = validate_generated_content("We drive you from the city. Book at https://viator.com today.")
    joined = " ".join(issues)
    assert "only one paragraph" in joined
    assert "External URL" in joined
    assert "operator name" in joined
    assert "First-person" in joined
    assert "too short" in joined
    assert "Cities Served:" in joined

def test_list_blocks_satisfy_section_checks():
    text = CLEAN + "\n\nCities Served:\n- San Jose\n- La Fortuna\n\nHotels Served:\n- Tabacon Lodge"
    assert not any("Served:" in issue for issue in validate_generated_content(text))
