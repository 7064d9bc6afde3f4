from ailearn.content_loader import load_catalog
from ailearn.glossary import filter_terms, find_term, glossary_categories, group_by_letter, resolve_related
from ailearn.models import GlossaryTerm


def _term(name: str, category: str = "General", related: tuple[str, ...] = ()) -> GlossaryTerm:
    return GlossaryTerm(term=name, definition=f"About {name.lower()}", category=category, related_terms=related)


def test_filter_terms_by_text_and_category() -> None:
    terms = load_catalog().glossary
    assert [term.term for term in filter_terms(terms, "reward")] == ["Reinforcement Learning"]
    ml = filter_terms(terms, "", "Machine Learning")
    assert {term.term for term in ml} == {"Supervised Learning", "Unsupervised Learning", "Reinforcement Learning"}
    assert filter_terms(terms, "LABELED", "Machine Learning")[0].term == "Supervised Learning"
    assert filter_terms(terms, "reward", "Data") == []


def test_glossary_categories_first_seen_order() -> None:
    terms = (_term("A", "X"), _term("B", "Y"), _term("C", "X"))
    assert glossary_categories(terms) == ["All", "X", "Y"]


def test_group_by_letter_sorts_letters_and_terms() -> None:
    groups = group_by_letter((_term("beta"), _term("Alpha"), _term("Bayes"), _term("")))
    assert list(groups) == ["A", "B"]
    assert [term.term for term in groups["B"]] == ["Bayes", "beta"]


def test_resolve_related_omits_dangling_links() -> None:
    terms = (_term("Model", related=("Missing", "Training")), _term("Training"))
    assert [term.term for term in resolve_related(terms[0], terms)] == ["Training"]
    assert resolve_related(terms[1], terms) == []


def test_find_term() -> None:
    terms = load_catalog().glossary
    found = find_term(terms, "Overfitting")
    assert found is not None
    assert found.category == "Model Performance"
    assert find_term(terms, "overfitting") is None
