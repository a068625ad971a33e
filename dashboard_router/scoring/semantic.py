"""Vocabulary-based semantic similarity between queries and adapters."""

import re
from typing import Dict, List

import numpy as np

_TOKEN = re.compile(r"[a-z0-9']+")


def tokenize(text: str) -> List[str]:
    return _TOKEN.findall(text.lower())


class SemanticSimilarity:
    """
    Scores how close a query is to each adapter's vocabulary.

    Every keyword phrase and the display name of an adapter become
    term-frequency vectors; an adapter's score is the best cosine
    similarity between the query vector and any of its phrase vectors.
    Subclasses can swap in embeddings by overriding score_adapters().
    """

    def phrases_for(self, adapter) -> List[str]:
        phrases = [keyword for keyword in adapter.get_keywords() if keyword]
        if adapter.display_name:
            phrases.append(adapter.display_name)
        return phrases

    async def score_adapters(self, query: str, adapters: List) -> Dict[str, float]:
        """
        Score all adapters for one query.

        Args:
            query: Preprocessed query text
            adapters: AppAdapter instances

        Returns:
            Dict of app_name -> similarity in [0, 1]
        """
        query_tokens = tokenize(query)
        scores: Dict[str, float] = {}
        if not query_tokens:
            return {adapter.app_name: 0.0 for adapter in adapters}

        for adapter in adapters:
            phrase_tokens = [tokenize(phrase) for phrase in self.phrases_for(adapter)]
            phrase_tokens = [tokens for tokens in phrase_tokens if tokens]
            scores[adapter.app_name] = self._best_cosine(query_tokens, phrase_tokens)
        return scores

    @staticmethod
    def _best_cosine(query_tokens: List[str], phrase_tokens: List[List[str]]) -> float:
        if not phrase_tokens:
            return 0.0

        vocabulary = {term: i for i, term in enumerate(sorted(set(query_tokens).union(*phrase_tokens)))}

        query_vector = np.zeros(len(vocabulary))
        for term in query_tokens:
            query_vector[vocabulary[term]] += 1

        phrase_matrix = np.zeros((len(phrase_tokens), len(vocabulary)))
        for row, tokens in enumerate(phrase_tokens):
            for term in tokens:
                phrase_matrix[row, vocabulary[term]] += 1

        norms = np.linalg.norm(phrase_matrix, axis=1) * np.linalg.norm(query_vector)
        similarities = (phrase_matrix @ query_vector) / norms
        return float(np.clip(similarities.max(), 0.0, 1.0))
