"""Phase 10 score tracker."""
