"""quotecards: incremental static builder for quote cards and pages."""
