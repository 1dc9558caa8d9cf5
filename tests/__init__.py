"""NETscout Test Suite

Test modules:
    test_port_parser    — port specification parsing (all edge cases)
    test_target_parser  — IP / CIDR target expansion
    test_probe          — single-probe classification on loopback and
                          patched socket failures
    test_results        — result aggregator accounting and snapshots
    test_worker_pool    — draining, backpressure and cancellation
    test_timing         — cancel signal and rate limiter
    test_scanner        — scan sessions end to end
    test_output         — text / JSON / CSV writers
    test_config         — settings validation and YAML defaults file
    test_cli            — command line flags and exit codes
    test_layering       — static import analysis enforcing layering rules
                          (utils / core / reporting)

Run all tests:
    pytest tests/ -v
"""
