from config.tag_config import generate_tag_name, LEADER_SUFFIX, MEMBER_SUFFIX, HEAD_SUFFIX


def test_generated_names_are_upper_snake_case():
    assert generate_tag_name("Worship Team", LEADER_SUFFIX) == "WORSHIP_TEAM_LEADER"
    assert generate_tag_name("  ushering & hospitality ", MEMBER_SUFFIX) == "USHERING_HOSPITALITY_MEMBER"
    assert generate_tag_name("Family-of-Grace", HEAD_SUFFIX) == "FAMILY_OF_GRACE_HEAD"
