"""
Signal analysis: raw signals → analyzed signals.

Modules
-------
temporal        : recency() + frequency() + velocity() + urgency() +
                  time_context(): pure functions of timestamps.
quantitative    : score_signal() dispatching to one rule per SignalType.
signal_analyzer : analyze_signal() / analyze_signals(): builds
                  AnalyzedSignal records with the heuristic urgency seed.
"""
