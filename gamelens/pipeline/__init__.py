from gamelens.pipeline.analysis import AnalysisInput, AnalysisPipeline, AnalysisResult

__all__ = ["AnalysisInput", "AnalysisPipeline", "AnalysisResult"]
