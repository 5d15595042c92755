"""Tests for event title to client matching."""

from core.matching import contains_word, find_client_matches, find_special_keyword

CLIENTS = ["Γιάννης Παπαδόπουλος", "Μαρία Οικονόμου", "Άννα-Μαρία Λύρα", "Νίκος"]
KEYWORDS = ("Εποπτεία", "Supervision")


class TestContainsWord:
    def test_whole_word(self):
        assert contains_word("συνεδρια λυρα", "λυρα")

    def test_substring_is_not_a_word(self):
        assert not contains_word("λυραρης", "λυρα")


class TestSpecialKeywords:
    def test_keyword_ignores_case_and_accents(self):
        assert find_special_keyword("εποπτεια με Γιάννη", KEYWORDS) == "Εποπτεία"

    def test_keyword_short_circuits_clients(self):
        assert find_client_matches("Supervision Παπαδόπουλος", CLIENTS, KEYWORDS) == [
            "Supervision"
        ]

    def test_no_keyword(self):
        assert find_special_keyword("Παπαδόπουλος", KEYWORDS) is None


class TestClientMatches:
    def test_full_name(self):
        assert find_client_matches("Γιάννης Παπαδόπουλος", CLIENTS) == ["Γιάννης Παπαδόπουλος"]

    def test_full_name_without_accents(self):
        assert find_client_matches("γιαννης παπαδοπουλος", CLIENTS) == ["Γιάννης Παπαδόπουλος"]

    def test_reversed_name(self):
        assert find_client_matches("Παπαδόπουλος Γιάννης", CLIENTS) == ["Γιάννης Παπαδόπουλος"]

    def test_surname_only(self):
        assert find_client_matches("Οικονόμου - online", CLIENTS) == ["Μαρία Οικονόμου"]

    def test_first_name_only(self):
        assert find_client_matches("Μαρία", CLIENTS) == ["Μαρία Οικονόμου"]

    def test_single_word_client(self):
        assert find_client_matches("Νίκος 2η συνεδρία", CLIENTS) == ["Νίκος"]

    def test_hyphenated_part(self):
        assert "Άννα-Μαρία Λύρα" in find_client_matches("άννα", CLIENTS)

    def test_short_first_name_needs_length(self):
        clients = ["Ιώ Σταθοπούλου"]
        assert find_client_matches("Ιώ", clients) == []

    def test_first_name_threshold_is_configurable(self):
        clients = ["Άκης Δημητρίου"]
        assert find_client_matches("άκης", clients, first_name_min_length=4) == ["Άκης Δημητρίου"]
        assert find_client_matches("άκης", clients, first_name_min_length=5) == []

    def test_multiple_matches_in_roster_order(self):
        matches = find_client_matches("Μαρία και Γιάννης", CLIENTS)
        assert matches[0] == "Γιάννης Παπαδόπουλος"
        assert "Μαρία Οικονόμου" in matches

    def test_no_match(self):
        assert find_client_matches("Οδοντίατρος", CLIENTS) == []

    def test_empty_title(self):
        assert find_client_matches("   ", CLIENTS, KEYWORDS) == []

    def test_blank_client_names_skipped(self):
        assert find_client_matches("Νίκος", ["", "  ", "Νίκος"]) == ["Νίκος"]


class TestDocumentedExamples:
    def test_full_name_with_free_text(self):
        clients = ["Σταυρούλα Παπαδοπούλου"]
        assert find_client_matches("Σταυρούλα Παπαδοπούλου - session", clients) == clients

    def test_reversed_unaccented_surname(self):
        clients = ["Σταυρούλα Παπαδοπούλου"]
        assert find_client_matches("παπαδοπουλου Σταυρούλα", clients) == clients

    def test_nickname_does_not_match(self):
        assert find_client_matches("Meeting with Bob", ["Robert Smith"]) == []


class TestHyphenTier:
    CLIENTS = ["Άννα-Μαρία Λύρα"]

    def test_accented_part_matches_accented_title(self):
        assert find_client_matches("Άννα", self.CLIENTS) == self.CLIENTS

    def test_parts_are_not_accent_folded(self):
        # Only the hyphen tier can match here, and it compares lowercased text as typed
        assert find_client_matches("αννα", self.CLIENTS) == []

    def test_empty_parts_are_ignored(self):
        assert find_client_matches("Ζωή", ["Νίκη Λύρα-"]) == []
