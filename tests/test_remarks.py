from branch_ledger import NarrationFields, format_remark, parse_remark


def test_empty_reference_slot_keeps_positions():
    parsed = parse_remark("LN-001||John|GroupA|First installment")
    assert parsed.loan_account_no == "LN-001"
    assert parsed.member_name == "John"
    assert parsed.group_name == "GroupA"
    assert parsed.description == "First installment"
    assert parsed.reference == ""


def test_missing_slots_default_to_empty():
    parsed = parse_remark("LN-002|R9")
    assert parsed == NarrationFields(loan_account_no="LN-002", reference="R9")


def test_description_joins_trailing_segments():
    parsed = parse_remark(" LN-3 | R | Asha | Sakhi | part one || part two ")
    assert parsed.loan_account_no == "LN-3"
    assert parsed.member_name == "Asha"
    assert parsed.description == "part one|part two"


def test_remark_without_separator_is_loan_account_slot():
    assert parse_remark("LN-009") == NarrationFields(loan_account_no="LN-009")
    assert parse_remark(" Office tea ") == NarrationFields(loan_account_no="Office tea")


def test_empty_remarks():
    assert parse_remark("") == NarrationFields()
    assert parse_remark(None) == NarrationFields()


def test_format_remark_is_parseable():
    fields = NarrationFields(
        loan_account_no="LN-10",
        reference="disb-4",
        member_name="Meena | K",
        group_name="Ujala",
        description="Loan  disbursed",
    )
    remark = fields.to_remark()
    assert remark == "LN-10|disb-4|Meena K|Ujala|Loan disbursed"
    assert parse_remark(remark).member_name == "Meena K"
    assert format_remark(member_name="A") == "||A||"
