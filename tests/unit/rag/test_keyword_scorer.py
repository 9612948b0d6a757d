"""KeywordScorer 테스트"""

import pytest

from affiliate_rag.domain.entities.record import CorpusType
from affiliate_rag.rag.keyword_scorer import KeywordScorer


class TestKeywordScorer:
    def test_title_match(self, campaigns):
        results = KeywordScorer().score("tech gadgets", campaigns)
        assert [r.record.title for r in results] == ["Tech Gadgets Promo"]
        assert results[0].keyword_score == pytest.approx(0.80)

    def test_body_match(self, campaigns):
        results = KeywordScorer().score("gardening", campaigns)
        assert [r.record.title for r in results] == ["Home & Garden"]

    def test_case_insensitive(self, campaigns):
        assert KeywordScorer().score("SUMMER", campaigns)

    def test_no_match(self, campaigns):
        assert KeywordScorer().score("crypto", campaigns) == []

    def test_academy_base_score(self, academy):
        results = KeywordScorer().score("conversion", academy)
        assert results[0].keyword_score == pytest.approx(0.75)

    def test_position_decay(self, make_record):
        corpus = [make_record(str(i), f"Item {i}", "shared words") for i in range(3)]
        results = KeywordScorer().score("shared", corpus)
        assert [r.keyword_score for r in results] == pytest.approx([0.80, 0.75, 0.70])
        assert [r.rank for r in results] == [1, 2, 3]

    def test_score_clamped_at_zero(self, make_record):
        corpus = [make_record(str(i), f"Item {i}", "shared") for i in range(25)]
        results = KeywordScorer().score("shared", corpus)
        assert all(0.0 <= r.keyword_score <= 1.0 for r in results)
        assert results[-1].keyword_score == 0.0

    def test_decay_counts_filtered_position(self, make_record):
        corpus = [
            make_record("1", "Alpha offer"),
            make_record("2", "Unrelated"),
            make_record("3", "Beta offer"),
        ]
        results = KeywordScorer().score("offer", corpus)
        assert [r.record_id for r in results] == ["1", "3"]
        assert results[1].keyword_score == pytest.approx(0.75)
        assert [r.source_index for r in results] == [0, 2]

    def test_vector_score_unset_and_combined_equals_keyword(self, campaigns):
        for result in KeywordScorer().score("campaign", campaigns):
            assert result.vector_score is None
            assert result.combined_score == result.keyword_score

    def test_general_corpus_default(self, make_record):
        corpus = [make_record("g1", "FAQ", "payout schedule", corpus_type=CorpusType.GENERAL)]
        results = KeywordScorer().score("payout", corpus)
        assert results[0].keyword_score == pytest.approx(0.70)

    def test_custom_base_scores_and_decay(self, make_record):
        scorer = KeywordScorer(base_scores={CorpusType.CAMPAIGN: 0.5}, decay=0.1)
        corpus = [make_record("1", "deal one"), make_record("2", "deal two")]
        results = scorer.score("deal", corpus)
        assert [r.keyword_score for r in results] == pytest.approx([0.5, 0.4])
        # untouched corpora keep their defaults
        assert scorer.base_scores[CorpusType.ACADEMY] == pytest.approx(0.75)

    def test_empty_query(self, campaigns):
        assert KeywordScorer().score("", campaigns) == []

    def test_records_not_mutated(self, campaigns):
        before = [r.model_dump() for r in campaigns]
        KeywordScorer().score("campaign", campaigns)
        assert [r.model_dump() for r in campaigns] == before


class TestTopicIntent:
    @pytest.mark.parametrize("query", ["commission rates", "what campaigns are available?"])
    def test_campaign_topic_returns_whole_corpus(self, campaigns, query):
        results = KeywordScorer().score(query, campaigns)
        assert [r.record.title for r in results] == [
            "Summer Fashion Sale",
            "Tech Gadgets Promo",
            "Home & Garden",
        ]
        assert [r.keyword_score for r in results] == pytest.approx([0.80, 0.75, 0.70])

    @pytest.mark.parametrize("query", ["learn", "any tutorial?", "show me academy tutorials"])
    def test_academy_topic_returns_whole_corpus(self, academy, query):
        results = KeywordScorer().score(query, academy)
        assert len(results) == 3
        assert [r.keyword_score for r in results] == pytest.approx([0.75, 0.70, 0.65])
        assert [r.rank for r in results] == [1, 2, 3]

    def test_topic_is_per_corpus(self, academy):
        assert KeywordScorer().score("campaign list", academy) == []

    def test_empty_mapping_disables_topics(self, campaigns):
        assert KeywordScorer(topic_keywords={}).score("commission rates", campaigns) == []

    def test_custom_keywords(self, campaigns):
        scorer = KeywordScorer(topic_keywords={CorpusType.CAMPAIGN: ["Deals"]})
        assert len(scorer.score("any deals today", campaigns)) == 3
        assert scorer.score("commission rates", campaigns) == []

    def test_matches_topic(self):
        scorer = KeywordScorer()
        assert scorer.matches_topic("Commission?", CorpusType.CAMPAIGN) is True
        assert scorer.matches_topic("tutorial", CorpusType.CAMPAIGN) is False
        assert scorer.matches_topic("tutorial", CorpusType.ACADEMY) is True
        assert scorer.matches_topic("tutorial", CorpusType.GENERAL) is False
