from collections import Counter


def test_index_serves_html(client):
    res = client.get('/')
    assert res.status_code == 200
    assert b'<h1>' in res.data


def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.data == b'OK'


def test_message(client):
    res = client.get('/message')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'success'


def test_post_message_success(client):
    res = client.post('/post_message', json={'status': 'success', 'content': 'hi'})
    assert res.status_code == 200
    assert res.get_json() == {'status': 'received', 'content': 'Message received: hi'}


def test_post_message_non_success_status(client):
    res = client.post('/post_message', json={'status': 'pending', 'content': 'hi'})
    assert res.status_code == 400
    assert res.get_json()['status'] == 'error'


def test_post_message_malformed(client):
    assert client.post('/post_message', data='not json', content_type='application/json').status_code == 400
    assert client.post('/post_message', json={'status': 'success'}).status_code == 400
    assert client.post('/post_message', json=['status', 'content']).status_code == 400


def test_blackjack_init_deals_full_deck(client):
    res = client.get('/blackjack_init')
    assert res.status_code == 200
    data = res.get_json()
    assert len(data['par_1']) == 2
    assert len(data['par_2']) == 2
    assert len(data['restante']) == 7
    cards = data['par_1'] + data['par_2'] + data['restante']
    assert Counter(cards) == Counter(range(1, 12))


def test_blackjack_init_is_independent_of_rooms(client, lifecycle):
    client.get('/blackjack_init')
    assert len(lifecycle.registry) == 0


def test_list_and_get_rooms(client, lifecycle):
    open_room = lifecycle.registry.create_room('A', 'table1')
    full_room = lifecycle.registry.create_room('B', 'table2')
    lifecycle.registry.try_join(full_room.room_id, 'C')

    listed = client.get('/rooms').get_json()
    assert [r['room_id'] for r in listed] == [open_room.room_id]

    res = client.get(f'/rooms/{full_room.room_id}')
    assert res.status_code == 200
    assert res.get_json()['state'] == 'full'
    assert 'creator_hand' not in res.get_json()


def test_get_missing_room(client):
    res = client.get('/rooms/nope')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Room not found'}


def test_rooms_report_busy_registry(client, lifecycle):
    registry = lifecycle.registry
    registry._lock_timeout = 0.01
    registry._lock_retries = 1
    registry._lock.acquire()
    try:
        listed = client.get('/rooms')
        single = client.get('/rooms/room_A')
    finally:
        registry._lock.release()

    assert listed.status_code == 503
    assert listed.get_json() == {'error': 'Server busy'}
    assert single.status_code == 503
    assert client.get('/rooms').status_code == 200
