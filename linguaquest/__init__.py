"""LinguaQuest - gamified language learning backend."""
