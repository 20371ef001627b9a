def test_imports():
    """
    @brief
    Verifies that all core allocprep modules are importable.

    @details
    Ensures package structure integrity and confirms that
    allocprep, allocprep.validator, allocprep.corrections and
    allocprep.export are accessible without import errors.
    """
    import allocprep
    import allocprep.advisory
    import allocprep.corrections
    import allocprep.dataloader
    import allocprep.export
    import allocprep.rules
    import allocprep.validator

    # --- Assert ---
    # Confirm that modules were successfully imported and resolved
    assert all(
        [
            allocprep,
            allocprep.advisory,
            allocprep.corrections,
            allocprep.dataloader,
            allocprep.export,
            allocprep.rules,
            allocprep.validator,
        ]
    )
