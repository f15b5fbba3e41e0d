"""Community stream: payment-stream gated community chat service."""
