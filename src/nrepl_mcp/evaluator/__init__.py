"""Evaluator adapter - the live Clojure session behind the bridge."""

from nrepl_mcp.evaluator.base import EvalOutcome, Evaluator, OutputBuffer
from nrepl_mcp.evaluator.nrepl import NReplEvaluator

__all__ = ["EvalOutcome", "Evaluator", "NReplEvaluator", "OutputBuffer"]
