"""
Ministry teams and family groups, and the tags generated for them.
"""
from config.tag_config import SystemTag
from api.regions.regions_model import Region
from api.tags.tags_model import Tag
from api.tags.tags_service import TagService


def create_team(client, headers, name='Worship Team'):
    resp = client.post('/api/teams', json={'name': name, 'description': 'Sunday praise'}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


def create_family(client, headers, region, name='Grace'):
    resp = client.post('/api/families', json={'name': name, 'regionId': region.id}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


class TestTeams:
    def test_create_generates_tags(self, client, db, manager_headers):
        team = create_team(client, manager_headers)
        assert team['leaderTagName'] == 'WORSHIP_TEAM_LEADER'
        assert team['memberTagName'] == 'WORSHIP_TEAM_MEMBER'
        names = {t.name for t in db.query(Tag).all()}
        assert {'WORSHIP_TEAM_LEADER', 'WORSHIP_TEAM_MEMBER'} <= names

    def test_duplicate_name(self, client, manager_headers):
        create_team(client, manager_headers)
        resp = client.post('/api/teams', json={'name': 'Worship Team'}, headers=manager_headers)
        assert resp.status_code == 400

    def test_rename_keeps_tag_rows_and_assignments(self, client, db, clock, member, manager_headers):
        team = create_team(client, manager_headers)
        client.post(f"/api/teams/{team['id']}/members", json={'memberId': member.id}, headers=manager_headers)
        original = db.query(Tag).filter_by(name='WORSHIP_TEAM_MEMBER').one()
        original_id = original.id

        resp = client.put(f"/api/teams/{team['id']}", json={'name': 'Praise Band'}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json()['memberTagName'] == 'PRAISE_BAND_MEMBER'

        db.expire_all()
        renamed = db.query(Tag).filter_by(name='PRAISE_BAND_MEMBER').one()
        assert renamed.id == original_id
        assert db.query(Tag).filter_by(name='WORSHIP_TEAM_MEMBER').first() is None
        assert TagService(db, clock).has_active_tag(member.id, 'PRAISE_BAND_MEMBER')

    def test_leader_swap_moves_tag(self, client, db, clock, make_member, manager_headers):
        first, second = make_member(), make_member()
        team = create_team(client, manager_headers)
        url = f"/api/teams/{team['id']}/leader"

        resp = client.put(url, json={'memberId': first.id}, headers=manager_headers)
        assert resp.json()['leader']['id'] == first.id
        client.put(url, json={'memberId': second.id}, headers=manager_headers)

        db.expire_all()
        tags = TagService(db, clock)
        assert not tags.has_active_tag(first.id, 'WORSHIP_TEAM_LEADER')
        assert tags.has_active_tag(second.id, 'WORSHIP_TEAM_LEADER')

        resp = client.put(url, json={'memberId': None}, headers=manager_headers)
        assert resp.json()['leader'] is None

    def test_members(self, client, db, clock, member, manager_headers):
        team = create_team(client, manager_headers)
        url = f"/api/teams/{team['id']}/members"
        assert client.post(url, json={'memberId': member.id}, headers=manager_headers).status_code == 201
        assert client.post(url, json={'memberId': member.id}, headers=manager_headers).status_code == 400

        detail = client.get(f"/api/teams/{team['id']}", headers=manager_headers).json()
        assert detail['memberCount'] == 1
        assert detail['members'][0]['memberId'] == member.id

        assert client.delete(f'{url}/{member.id}', headers=manager_headers).status_code == 200
        assert client.delete(f'{url}/{member.id}', headers=manager_headers).status_code == 404
        db.expire_all()
        assert not TagService(db, clock).has_active_tag(member.id, 'WORSHIP_TEAM_MEMBER')

    def test_delete_deactivates_assignments(self, client, db, clock, member, manager_headers):
        team = create_team(client, manager_headers)
        client.post(f"/api/teams/{team['id']}/members", json={'memberId': member.id}, headers=manager_headers)
        client.put(f"/api/teams/{team['id']}/leader", json={'memberId': member.id}, headers=manager_headers)

        assert client.delete(f"/api/teams/{team['id']}", headers=manager_headers).status_code == 200
        assert client.get(f"/api/teams/{team['id']}", headers=manager_headers).status_code == 404

        db.expire_all()
        tags = TagService(db, clock)
        assert not tags.has_active_tag(member.id, 'WORSHIP_TEAM_LEADER')
        assert not tags.has_active_tag(member.id, 'WORSHIP_TEAM_MEMBER')


class TestFamilies:
    def test_create_generates_tags(self, client, region, manager_headers):
        family = create_family(client, manager_headers, region, name='House of Grace')
        assert family['headTagName'] == 'HOUSE_OF_GRACE_HEAD'
        assert family['memberTagName'] == 'HOUSE_OF_GRACE_MEMBER'
        assert family['regionName'] == region.name

    def test_unknown_region(self, client, manager_headers):
        resp = client.post('/api/families', json={'name': 'Grace', 'regionId': 999}, headers=manager_headers)
        assert resp.status_code == 404

    def test_head_gets_family_head_tag(self, client, db, clock, region, member, manager_headers):
        family = create_family(client, manager_headers, region)
        resp = client.put(f"/api/families/{family['id']}/head", json={'memberId': member.id}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json()['familyHead']['id'] == member.id
        assert resp.json()['memberCount'] == 1

        db.expire_all()
        tags = TagService(db, clock)
        assert tags.has_active_tag(member.id, SystemTag.family_head)
        assert tags.has_active_tag(member.id, 'GRACE_HEAD')
        assert tags.has_active_tag(member.id, 'GRACE_MEMBER')

    def test_head_of_one_family_only(self, client, region, member, manager_headers):
        grace = create_family(client, manager_headers, region, name='Grace')
        mercy = create_family(client, manager_headers, region, name='Mercy')
        client.put(f"/api/families/{grace['id']}/head", json={'memberId': member.id}, headers=manager_headers)

        resp = client.put(f"/api/families/{mercy['id']}/head", json={'memberId': member.id}, headers=manager_headers)
        assert resp.status_code == 400
        assert resp.json()['detail'] == 'Member is already heading another family: Grace'

    def test_member_must_share_region(self, client, db, region, make_member, manager_headers):
        elsewhere = Region(name='Far Campus')
        db.add(elsewhere)
        db.commit()
        outsider = make_member(region_id=elsewhere.id)
        family = create_family(client, manager_headers, region)

        resp = client.post(f"/api/families/{family['id']}/members", json={'memberId': outsider.id}, headers=manager_headers)
        assert resp.status_code == 400

    def test_remove_head(self, client, db, clock, region, member, manager_headers):
        family = create_family(client, manager_headers, region)
        url = f"/api/families/{family['id']}/head"
        assert client.delete(url, headers=manager_headers).status_code == 404

        client.put(url, json={'memberId': member.id}, headers=manager_headers)
        resp = client.delete(url, headers=manager_headers)
        assert resp.json()['familyHead'] is None

        db.expire_all()
        assert not TagService(db, clock).has_active_tag(member.id, SystemTag.family_head)

    def test_rename_renames_tags_in_place(self, client, db, clock, region, member, manager_headers):
        family = create_family(client, manager_headers, region)
        client.put(f"/api/families/{family['id']}/head", json={'memberId': member.id}, headers=manager_headers)
        head_tag_id = db.query(Tag).filter_by(name='GRACE_HEAD').one().id

        resp = client.put(f"/api/families/{family['id']}", json={'name': 'New Hope'}, headers=manager_headers)
        assert resp.json()['headTagName'] == 'NEW_HOPE_HEAD'

        db.expire_all()
        assert db.query(Tag).filter_by(name='NEW_HOPE_HEAD').one().id == head_tag_id
        assert TagService(db, clock).has_active_tag(member.id, 'NEW_HOPE_HEAD')

    def test_delete_releases_head_and_members(self, client, db, clock, region, make_member, manager_headers):
        head, other = make_member(), make_member()
        family = create_family(client, manager_headers, region)
        client.put(f"/api/families/{family['id']}/head", json={'memberId': head.id}, headers=manager_headers)
        client.post(f"/api/families/{family['id']}/members", json={'memberId': other.id}, headers=manager_headers)

        assert client.delete(f"/api/families/{family['id']}", headers=manager_headers).status_code == 200
        db.expire_all()
        tags = TagService(db, clock)
        assert not tags.has_active_tag(head.id, SystemTag.family_head)
        assert not tags.has_active_tag(other.id, 'GRACE_MEMBER')
        assert client.get('/api/families', headers=manager_headers).json() == []
