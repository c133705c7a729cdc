import pytest

from conftest import add_user, login

pytestmark = pytest.mark.usefixtures('ordered_dealing')


def test_login_and_current_session(client, alice):
    res = login(client, 'alice')
    assert res.status_code == 201
    assert res.get_json()['username'] == 'alice'
    assert client.get('/api/sessions/current').get_json()['id'] == alice.id
    assert client.delete('/api/sessions/current').get_json() == {'success': True}
    assert client.get('/api/sessions/current').status_code == 401


def test_login_rejects_bad_credentials(client, alice):
    assert login(client, 'alice', 'nope').status_code == 401
    assert client.post('/api/sessions', json={'username': 'alice'}).status_code == 422


def test_games_require_login(client, deck):
    res = client.post('/api/games', json={})
    assert res.status_code == 401
    assert res.get_json()['type'] == 'UNAUTHENTICATED'
    assert client.get('/api/games/current').status_code == 401


def test_create_game(alice_client, deck):
    res = alice_client.post('/api/games', json={'theme': 'university_life'})
    assert res.status_code == 201
    data = res.get_json()
    assert data['game']['status'] == 'playing'
    assert data['game']['cards_collected'] == 3
    assert [c['bad_luck_index'] for c in data['initialCards']] == [20, 55, 80]


def test_second_create_conflicts(alice_client, deck):
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    res = alice_client.post('/api/games', json={})
    assert res.status_code == 409
    body = res.get_json()
    assert body['type'] == 'ACTIVE_GAME_EXISTS'
    assert body['activeGameId'] == game_id


def test_create_rejects_unknown_theme(alice_client, deck):
    res = alice_client.post('/api/games', json={'theme': 'pirates'})
    assert res.status_code == 422


def test_next_round_hides_index_and_is_idempotent(alice_client, deck):
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    first = alice_client.post(f'/api/games/{game_id}/next-round')
    assert first.status_code == 200
    data = first.get_json()
    assert 'bad_luck_index' not in data['roundCard']
    assert data['roundNumber'] == 1
    assert data['timeLimit'] == 30

    again = alice_client.post(f'/api/games/{game_id}/next-round').get_json()
    assert again['roundCard']['gameCardId'] == data['roundCard']['gameCardId']
    assert again['message'] == 'Continue current round'


def test_guess_flow(alice_client, deck):
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    round_card = alice_client.post(f'/api/games/{game_id}/next-round').get_json()['roundCard']

    res = alice_client.post(f'/api/games/{game_id}/guess', json={
        'gameCardId': round_card['gameCardId'], 'position': 1, 'timeElapsed': 4,
    })
    assert res.status_code == 200
    data = res.get_json()
    assert data['correct'] is True
    assert data['correctPosition'] == 1
    assert data['timedOut'] is False
    assert data['gameStatus'] == 'playing'
    assert data['revealedCard']['bad_luck_index'] == 55
    assert data['game']['cards_collected'] == 4

    # Same card again: the round already moved on
    res = alice_client.post(f'/api/games/{game_id}/guess', json={
        'gameCardId': round_card['gameCardId'], 'position': 1,
    })
    assert res.status_code == 409
    assert res.get_json()['reason'] == 'WRONG_ROUND'


def test_guess_validation(alice_client, deck):
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    res = alice_client.post(f'/api/games/{game_id}/guess', json={'position': -1, 'timeElapsed': 'soon'})
    assert res.status_code == 422
    assert len(res.get_json()['errors']) == 3


def test_timeout_route(alice_client, deck):
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    round_card = alice_client.post(f'/api/games/{game_id}/next-round').get_json()['roundCard']
    res = alice_client.post(f'/api/games/{game_id}/timeout', json={'gameCardId': round_card['gameCardId']})
    assert res.status_code == 200
    data = res.get_json()
    assert data['isTimeout'] is True
    assert data['timedOut'] is True
    assert data['correct'] is False
    assert data['game']['wrong_guesses'] == 1
    assert data['game']['current_round'] == 2


def test_other_users_game_is_forbidden(flask_app, alice_client, deck):
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    add_user('bob')
    bob_client = flask_app.test_client()
    login(bob_client, 'bob')
    res = bob_client.post(f'/api/games/{game_id}/next-round')
    assert res.status_code == 403
    assert res.get_json()['type'] == 'NOT_OWNER'
    assert bob_client.delete(f'/api/games/{game_id}').status_code == 403


def test_unknown_game(alice_client, deck):
    res = alice_client.post('/api/games/999/next-round')
    assert res.status_code == 404
    assert res.get_json()['type'] == 'GAME_NOT_FOUND'


def test_abandon_is_idempotent(alice_client, deck):
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    assert alice_client.delete(f'/api/games/{game_id}').status_code == 204
    assert alice_client.delete(f'/api/games/{game_id}').status_code == 204
    assert alice_client.get('/api/games/current').status_code == 404
    res = alice_client.post(f'/api/games/{game_id}/next-round')
    assert res.status_code == 400
    assert res.get_json()['type'] == 'GAME_NOT_ACTIVE'


def test_current_and_history(alice_client, deck):
    assert alice_client.get('/api/games/current').status_code == 404
    game_id = alice_client.post('/api/games', json={}).get_json()['game']['id']
    alice_client.post(f'/api/games/{game_id}/next-round')

    current = alice_client.get('/api/games/current').get_json()
    assert current['game']['id'] == game_id
    assert [c['bad_luck_index'] for c in current['handCards']] == [20, 55, 80]
    assert 'bad_luck_index' not in current['roundCard']
    assert current['timeRemaining'] <= 30

    assert alice_client.get('/api/games/history').get_json() == []
    alice_client.delete(f'/api/games/{game_id}')
    history = alice_client.get('/api/games/history').get_json()
    assert len(history) == 1
    assert history[0]['status'] == 'lost'
    cards = history[0]['cards']
    assert len(cards) == 4
    # Abandoned round: dealt but never resolved
    assert cards[-1]['guessed_correctly'] is None
    assert cards[-1]['won'] is False
    assert history[0]['wrong_guesses'] == 0
