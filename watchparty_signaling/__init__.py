"""Watch-party signaling relay: room membership and WebRTC negotiation fan-out."""
